"""Tests for entrylist.py module."""

import pytest

from k8s_secret_manifest import entrylist
from k8s_secret_manifest.entrylist import Entry
from k8s_secret_manifest.exceptions import (
    DuplicateKeyError,
    EmptyKeyError,
    EntryListError,
    IndexOutOfRangeError,
    LengthMismatchError,
    NotFoundError,
)

ALICE = Entry("alice", "pass1")
BOB = Entry("bob", "pass2")
CAROL = Entry("carol", "pass3")


class TestParse:
    """Tests for parsing the two joined lists."""

    def test_parse_pairs_by_position(self):
        """Test index i of the keys pairs with index i of the values."""
        assert entrylist.parse("alice;bob;carol", "pass1;pass2;pass3") == [ALICE, BOB, CAROL]

    def test_parse_trims_whitespace(self):
        """Test tokens are trimmed."""
        assert entrylist.parse(" alice ; bob ", "pass1 ;  pass2") == [ALICE, BOB]

    def test_parse_drops_stray_separators(self):
        """Test trailing and doubled separators do not produce entries."""
        assert entrylist.parse("alice;;bob;", "pass1;pass2;") == [ALICE, BOB]

    def test_parse_empty_inputs(self):
        """Test two empty strings parse to an empty list."""
        assert entrylist.parse("", "") == []

    def test_parse_custom_separator(self):
        """Test a caller-chosen separator."""
        assert entrylist.parse("alice,bob", "pass1,pass2", ",") == [ALICE, BOB]

    def test_parse_length_mismatch(self):
        """Test two keys against one value fails naming both counts."""
        with pytest.raises(LengthMismatchError, match="2 key\\(s\\) but 1 value\\(s\\)") as exc_info:
            entrylist.parse("alice;bob", "pass1")

        assert exc_info.value.key_count == 2
        assert exc_info.value.value_count == 1

    def test_parse_empty_key_at_index(self):
        """Test a blank leading key that lines up with a value is reported by index."""
        with pytest.raises(EmptyKeyError, match="empty key at index 0") as exc_info:
            entrylist.parse(";bob", "pass1;pass2")

        assert exc_info.value.index == 0

    def test_parse_errors_share_base_class(self):
        """Test entry list failures can be caught together."""
        with pytest.raises(EntryListError):
            entrylist.parse("alice", "")


class TestSerialize:
    """Tests for joining entries back into two strings."""

    def test_serialize(self):
        """Test keys and values are joined in order."""
        assert entrylist.serialize([ALICE, BOB]) == ("alice;bob", "pass1;pass2")

    def test_serialize_empty(self):
        """Test an empty list serialises to two empty strings."""
        assert entrylist.serialize([]) == ("", "")

    def test_serialize_keeps_empty_values(self):
        """Test empty values are written as empty tokens."""
        assert entrylist.serialize([Entry("alice", ""), BOB]) == ("alice;bob", ";pass2")

    def test_round_trip(self):
        """Test serialize(parse(k, v)) gives back the original strings."""
        keys, values = "alice;bob;carol", "pass1;pass2;pass3"
        assert entrylist.serialize(entrylist.parse(keys, values)) == (keys, values)

    def test_empty_value_does_not_survive_round_trip(self):
        """Test an empty value is dropped on the next parse."""
        keys, values = entrylist.serialize([Entry("alice", ""), BOB])
        with pytest.raises(LengthMismatchError):
            entrylist.parse(keys, values)


class TestAdd:
    """Tests for appending entries."""

    def test_add_appends(self):
        """Test the new entry goes last."""
        assert entrylist.add([ALICE], "bob", "pass2") == [ALICE, BOB]

    def test_add_does_not_mutate_input(self):
        """Test the input list is left untouched."""
        original = [ALICE]
        entrylist.add(original, "bob", "pass2")
        assert original == [ALICE]

    def test_add_duplicate(self):
        """Test adding an existing key fails."""
        with pytest.raises(DuplicateKeyError, match="entry 'alice' already exists"):
            entrylist.add([ALICE], "alice", "other")

    def test_add_empty_key(self):
        """Test adding an empty key fails."""
        with pytest.raises(EmptyKeyError, match="key must not be empty"):
            entrylist.add([ALICE], "", "value")

    def test_add_empty_value_allowed(self):
        """Test values may be empty."""
        assert entrylist.add([], "alice", "") == [Entry("alice", "")]


class TestInsert:
    """Tests for inserting entries at a position."""

    def test_insert_at_zero(self):
        """Test index 0 prepends."""
        assert entrylist.insert([BOB, CAROL], 0, "alice", "pass1") == [ALICE, BOB, CAROL]

    def test_insert_in_middle(self):
        """Test later entries shift one position."""
        assert entrylist.insert([ALICE, CAROL], 1, "bob", "pass2") == [ALICE, BOB, CAROL]

    def test_insert_at_length_equals_add(self):
        """Test index len(entries) behaves like add."""
        entries = [ALICE, BOB]
        assert entrylist.insert(entries, len(entries), "carol", "pass3") == entrylist.add(entries, "carol", "pass3")

    @pytest.mark.parametrize("index", [-1, 3])
    def test_insert_out_of_range(self, index):
        """Test negative and past-the-end indices fail."""
        with pytest.raises(IndexOutOfRangeError, match=f"index {index} out of range \\[0, 2\\]"):
            entrylist.insert([ALICE, BOB], index, "carol", "pass3")

    def test_insert_duplicate(self):
        """Test inserting an existing key fails."""
        with pytest.raises(DuplicateKeyError):
            entrylist.insert([ALICE, BOB], 0, "bob", "x")

    def test_insert_empty_key(self):
        """Test inserting an empty key fails."""
        with pytest.raises(EmptyKeyError):
            entrylist.insert([ALICE], 0, "", "x")


class TestRemove:
    """Tests for removing entries by key or value."""

    def test_remove_by_key(self):
        """Test the matching entry is removed and order kept."""
        assert entrylist.remove([ALICE, BOB, CAROL], "bob") == [ALICE, CAROL]

    def test_remove_last_entry(self):
        """Test removing the only entry yields an empty list."""
        assert entrylist.remove([ALICE], "alice") == []

    def test_remove_missing_key(self):
        """Test removing an unknown key fails."""
        with pytest.raises(NotFoundError, match="entry with key 'dave' not found"):
            entrylist.remove([ALICE], "dave")

    def test_remove_by_value_first_match(self):
        """Test only the earliest entry with the value is removed."""
        entries = [Entry("alice", "shared"), Entry("bob", "shared")]
        assert entrylist.remove_by_value(entries, "shared") == [Entry("bob", "shared")]

    def test_remove_by_value_missing(self):
        """Test removing an unknown value fails."""
        with pytest.raises(NotFoundError, match="entry with value 'nope' not found"):
            entrylist.remove_by_value([ALICE], "nope")

    def test_add_then_remove_restores(self):
        """Test removing what was just inserted restores the original list."""
        original = [ALICE, CAROL]
        inserted = entrylist.insert(original, 1, "bob", "pass2")
        assert entrylist.remove(inserted, "bob") == original
        assert entrylist.remove_by_value(inserted, "pass2") == original


class TestKeys:
    """Tests for projecting keys."""

    def test_keys_in_order(self):
        """Test keys come back in list order and are distinct."""
        keys = entrylist.keys([CAROL, ALICE, BOB])
        assert keys == ["carol", "alice", "bob"]
        assert len(set(keys)) == len(keys)
