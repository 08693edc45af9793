"""Tests for site_snapshot.urls module."""

import pytest

from site_snapshot.errors import MalformedReference
from site_snapshot.urls import (
    disambiguate,
    is_bare_host,
    map_to_local_path,
    relative_from,
    resolve,
    url_hash,
)

BASE = "https://a.com/x/y.html"


class TestResolve:
    def test_parent_relative(self):
        assert resolve(BASE, "../z.png") == "https://a.com/z.png"

    def test_protocol_relative(self):
        assert resolve(BASE, "//cdn.com/f.js") == "https://cdn.com/f.js"

    def test_absolute_path(self):
        assert resolve(BASE, "/abs/p.css") == "https://a.com/abs/p.css"

    def test_document_relative(self):
        assert resolve(BASE, "rel/p.css") == "https://a.com/x/rel/p.css"

    def test_absolute_reference_kept(self):
        assert resolve(BASE, "http://b.org/q.js?v=1") == "http://b.org/q.js?v=1"

    def test_surrounding_whitespace_stripped(self):
        assert resolve(BASE, "  img.png \t") == "https://a.com/x/img.png"

    def test_invalid_ipv6_host(self):
        with pytest.raises(MalformedReference):
            resolve(BASE, "http://[::1/broken.png")

    @pytest.mark.parametrize("reference", ["mailto:me@a.com", "javascript:void(0)"])
    def test_non_http_scheme(self, reference):
        with pytest.raises(MalformedReference):
            resolve(BASE, reference)

    def test_control_characters(self):
        with pytest.raises(MalformedReference) as excinfo:
            resolve(BASE, "img\n.png")
        assert excinfo.value.url == "img\n.png"


class TestMapToLocalPath:
    def test_host_first_path(self):
        url = "https://Example.com/assets/img/logo.png?v=2#top"
        assert map_to_local_path(url) == "example.com/assets/img/logo.png"

    def test_root_maps_to_host(self):
        assert map_to_local_path("https://example.com/") == "example.com"
        assert map_to_local_path("https://example.com") == "example.com"

    def test_trailing_slash_dropped(self):
        assert map_to_local_path("https://example.com/dir/") == "example.com/dir"

    def test_percent_decoded(self):
        assert map_to_local_path("https://example.com/a%20b.png") == "example.com/a b.png"

    def test_dot_segments_stay_below_host(self):
        url = "https://example.com/../../etc/./passwd"
        assert map_to_local_path(url) == "example.com/etc/passwd"

    def test_port_dropped(self):
        assert map_to_local_path("http://localhost:8000/app.js") == "localhost/app.js"

    def test_deterministic(self):
        url = "https://cdn.test/lib/v1/x.js"
        assert map_to_local_path(url) == map_to_local_path(url)


class TestIsBareHost:
    def test_bare(self):
        assert is_bare_host("example.com")

    def test_with_path(self):
        assert not is_bare_host("example.com/a.css")


class TestRelativeFrom:
    def test_from_root_document(self):
        assert relative_from("index.html", "site.test/img/a.png") == "site.test/img/a.png"

    def test_sibling_directory(self):
        assert relative_from("ex.com/css/main.css", "ex.com/img/bg.png") == "../img/bg.png"

    def test_other_host(self):
        assert (
            relative_from("ex.com/css/main.css", "cdn.com/font.woff")
            == "../../cdn.com/font.woff"
        )

    def test_same_directory(self):
        assert relative_from("ex.com/a.css", "ex.com/b.css") == "b.css"

    def test_encodes_for_embedding(self):
        assert relative_from("ex.com/a.css", "ex.com/a b.png") == "a%20b.png"


class TestDisambiguate:
    def test_hash_before_extension(self):
        url = "https://ex.com/style.css?v=2"
        assert disambiguate("ex.com/style.css", url) == f"ex.com/style.{url_hash(url)}.css"

    def test_no_extension(self):
        url = "https://ex.com/LICENSE?x"
        assert disambiguate("ex.com/LICENSE", url) == f"ex.com/LICENSE.{url_hash(url)}"

    def test_hash_is_stable(self):
        assert url_hash("https://ex.com/a") == url_hash("https://ex.com/a")
        assert len(url_hash("https://ex.com/a")) == 8
