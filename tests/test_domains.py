from sinkingyachts.utils.domains import ContentScanner, extract_hostnames


def test_extract_hostnames_keeps_order_and_duplicates():
    text = "see https://b.example/x and http://a.example then https://b.example/y?z=1"
    assert extract_hostnames(text) == ["b.example", "a.example", "b.example"]


def test_extract_hostnames_lowercases_hosts():
    assert extract_hostnames("go to http://Evil.Example/Path") == ["evil.example"]


def test_extract_hostnames_ignores_text_without_urls():
    assert extract_hostnames("") == []
    assert extract_hostnames("nothing to see at evil.example") == []
    assert extract_hostnames("ftp://files.example/archive") == []


def test_extract_hostnames_requires_dotted_host():
    assert extract_hostnames("http://localhost/admin") == []


def test_extract_hostnames_without_path_tail():
    assert extract_hostnames("http://a.b") == ["a.b"]


def test_extract_hostnames_skips_unparseable_match():
    # Port is out of range, so the URL parser rejects the match
    text = "http://bad.example:99999/x http://good.example/"
    assert extract_hostnames(text) == ["good.example"]


def test_extract_hostnames_stops_at_trailing_punctuation():
    assert extract_hostnames("visit http://evil.example, now.") == ["evil.example"]
    assert extract_hostnames("no links here") == []


def test_content_scanner_accepts_custom_pattern():
    import re

    scanner = ContentScanner(re.compile(r"https://[\w.-]+"))
    assert scanner.extract_hostnames("http://a.example https://b.example") == ["b.example"]
