from offmarket.etl import keywords


def test_expand_industry_uses_synonyms_case_insensitively():
    assert keywords.expand_industry("  HVAC ") == ["hvac", "heating", "air conditioning", "mechanical contractor"]


def test_expand_industry_unknown_label_is_sole_keyword():
    assert keywords.expand_industry(" Pool Maintenance ") == ["Pool Maintenance"]


def test_modifier_variant():
    assert keywords.modifier_variant("janitorial") == "janitorial service"
    assert keywords.modifier_variant("Commercial Cleaning") == "Commercial Cleaning service"
    assert keywords.modifier_variant("roofer") == "roofer contractor"


def test_hvac_scenario():
    variants = keywords.expand_keywords(["HVAC"])

    assert variants[:4] == ["hvac", "heating", "air conditioning", "mechanical contractor"]
    assert "hvac contractor" in variants
    assert "heating contractor" in variants
    assert "air conditioning contractor" in variants
    # already carries a business-type word, so no extra variant
    assert "mechanical contractor contractor" not in variants
    assert len(variants) == 7


def test_modifier_pass_skips_service_and_company_words():
    variants = keywords.expand_keywords(["landscaping", "Acme Company"])

    assert "landscape services" in variants
    assert "landscape services contractor" not in variants
    assert "Acme Company contractor" not in variants


def test_variants_are_deduplicated():
    variants = keywords.expand_keywords(["cleaning", "janitorial", "commercial cleaning"])
    lowered = [v.lower() for v in variants]
    assert len(lowered) == len(set(lowered))
    assert "cleaning service" in lowered


def test_caps_apply_to_base_keywords_and_variants():
    industries = ["hvac", "electrical", "plumbing", "roofing"]

    variants = keywords.expand_keywords(industries)

    assert len(variants) == 12
    # the first eight base keywords survive ahead of any modifier variant
    assert variants[:8] == [
        "hvac",
        "heating",
        "air conditioning",
        "mechanical contractor",
        "electrical",
        "electrician",
        "electrical contractor",
        "plumbing",
    ]


def test_variant_cap_never_drops_below_base_count():
    variants = keywords.expand_keywords(["hvac", "plumbing", "roofing"], keyword_cap=8, variant_cap=4)
    assert len(variants) == 8
