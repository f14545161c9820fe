import pytest

from relay.constants import MAX_ROOM_ID_LENGTH, MAX_USERNAME_LENGTH, ROOM_ID_ALPHABET
from relay.validators import generate_room_id, sanitize_username, validate_room_id, validate_username


@pytest.mark.parametrize("room_id", ["", None, "R1", "X7K2Q", "team-42_ü", "team chat", "a" * MAX_ROOM_ID_LENGTH])
def test_valid_room_ids(room_id):
    assert validate_room_id(room_id) == (True, "")


@pytest.mark.parametrize("room_id", [42, "tab\there", "nul\x00", "a" * (MAX_ROOM_ID_LENGTH + 1)])
def test_invalid_room_ids(room_id):
    is_valid, error = validate_room_id(room_id)

    assert not is_valid
    assert error


def test_sanitize_username_strips_control_chars_and_truncates():
    assert sanitize_username("ali\x1bce\n") == "alice"
    assert sanitize_username(" Bob ") == " Bob "
    assert sanitize_username("x" * 100) == "x" * MAX_USERNAME_LENGTH
    assert sanitize_username(None) == ""


def test_validate_username():
    assert validate_username("   ")[0] is False
    assert validate_username("alice") == (True, "")
    assert validate_username("")[0] is False


def test_generate_room_id_avoids_live_ids():
    room_id = generate_room_id(length=12)

    assert len(room_id) == 12
    assert set(room_id) <= set(ROOM_ID_ALPHABET)
    assert generate_room_id({room_id}, length=12) != room_id
