from locus.core.datasource.identifiers import fnv1a_64, url_to_id

_MASK64 = 0xFFFFFFFFFFFFFFFF


def test_fnv1a_64_reference_vectors():
    assert fnv1a_64(b"") == 0xCBF29CE484222325
    assert fnv1a_64(b"a") == 0xAF63DC4C8601EC8C
    assert fnv1a_64(b"foobar") == 0x85944171F73967E8


def test_url_to_id_is_signed_64_bit():
    topic_id = url_to_id("a")

    assert topic_id < 0
    assert topic_id & _MASK64 == 0xAF63DC4C8601EC8C
    assert -(1 << 63) <= url_to_id("https://example.com/") < (1 << 63)


def test_url_to_id_is_deterministic_and_url_sensitive():
    url = "https://www.python.org/"

    assert url_to_id(url) == url_to_id("https://www.python.org/")
    assert url_to_id(url) != url_to_id("https://www.python.org")
