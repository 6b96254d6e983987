from tunedir.paths import display_name, parent_directory, same_directory


class TestDisplayName:
    """Tests for display_name."""

    def test_file(self):
        """Test a file path shows its file name."""
        assert display_name("/music/rock/01.mp3") == "01.mp3"

    def test_trailing_separator(self):
        """Test a trailing separator is ignored."""
        assert display_name("/music/album/") == "album"

    def test_root(self):
        """Test the root is shown as is."""
        assert display_name("/") == "/"

    def test_relative(self):
        """Test a bare name is returned unchanged."""
        assert display_name("song.mp3") == "song.mp3"


class TestParentDirectory:
    """Tests for parent_directory and same_directory."""

    def test_parent(self):
        assert parent_directory("/music/rock") == "/music"
        assert parent_directory("/music/rock/") == "/music"

    def test_root_is_its_own_parent(self):
        """Test going up from the root stays at the root."""
        assert parent_directory("/") == "/"
        assert parent_directory("/music") == "/"

    def test_same_directory(self):
        """Test trailing separators and dot segments do not matter."""
        assert same_directory("/music/", "/music")
        assert same_directory("/music/rock/..", "/music")
        assert not same_directory("/music/rock", "/music")
