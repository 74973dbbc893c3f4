from cement_tracker.services.tracking_codes import (
    URL_SAFE_ALPHABET,
    generate_tracking_code,
    normalize_tracking_code,
    tracking_link,
)


def test_generated_code_shape():
    code = generate_tracking_code()

    assert len(code) == 10
    assert code == code.upper()
    assert set(code) <= set(URL_SAFE_ALPHABET.upper())


def test_generated_codes_do_not_collide():
    codes = [generate_tracking_code() for _ in range(100_000)]

    assert len(set(codes)) == len(codes)


def test_normalize_tracking_code():
    assert normalize_tracking_code("  ab_c-12xyz ") == "AB_C-12XYZ"


def test_tracking_link_uses_base_url():
    assert tracking_link("ABC123DEF4", "https://entregas.example.com/") == (
        "https://entregas.example.com/rastrear/ABC123DEF4"
    )
