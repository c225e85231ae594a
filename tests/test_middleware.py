from federation_portal.middleware import extract_subdomain, resolve_federation_code, resolve_locale

CODES = ["kg", "kz", "uz", "ru", "ae"]
LOCALES = ["ru", "en", "kg", "kz", "uz", "ar"]


def test_extract_subdomain():
    assert extract_subdomain("kg.sportportal.org") == "kg"
    assert extract_subdomain("kg.sportportal.org:443") == "kg"
    assert extract_subdomain("sportportal.org") is None
    assert extract_subdomain("www.sportportal.org") is None
    assert extract_subdomain("localhost:8000") is None


def test_federation_from_subdomain():
    assert resolve_federation_code("kz.sportportal.org", "/auth/send-pin", CODES) == "kz"
    assert resolve_federation_code("api.sportportal.org", "/auth/send-pin", CODES) is None


def test_federation_from_path_wins():
    assert resolve_federation_code("kz.sportportal.org", "/kg/cabinet", CODES) == "kg"
    assert resolve_federation_code("localhost:3000", "/UZ/", CODES) == "uz"
    assert resolve_federation_code("localhost:3000", "/admin", CODES) is None


def test_locale_resolution_order():
    assert resolve_locale("kg", "en-US,en;q=0.9", LOCALES, "ru") == "kg"
    assert resolve_locale(None, "en-US,en;q=0.9", LOCALES, "ru") == "en"
    assert resolve_locale("xx", "de-DE", LOCALES, "ru") == "ru"
    assert resolve_locale(None, None, LOCALES, "ru") == "ru"
