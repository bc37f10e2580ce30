"""Unit tests for documents.slugs module."""

from docpub.documents import slugify, unique_slug


class TestSlugify:
    """Test cases for slugify."""

    def test_basic(self):
        """Words are lowercased and dash-joined."""
        assert slugify("Hello, World!") == "hello-world"

    def test_untitled_fallback(self):
        """Text with no slug characters becomes 'untitled'."""
        assert slugify("???") == "untitled"
        assert slugify("") == "untitled"

    def test_max_length_trims_dashes(self):
        """Truncated slugs never end in a dash."""
        assert slugify("abc def", max_length=4) == "abc"


class TestUniqueSlug:
    """Test cases for unique_slug."""

    def test_free_slug_kept(self):
        """An unused slug is returned unchanged."""
        assert unique_slug("intro", []) == "intro"

    def test_suffix_increments(self):
        """Collisions append the first free counter."""
        assert unique_slug("intro", {"intro", "intro-1"}) == "intro-2"

    def test_suffix_is_base36(self):
        """Counters beyond 9 use base-36 digits."""
        taken = {"intro"} | {f"intro-{i}" for i in range(1, 10)}
        assert unique_slug("intro", taken) == "intro-a"
