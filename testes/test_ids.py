import hashlib

from wp2contentful.utils.ids import derive_id


def test_same_key_gives_same_id():
    assert derive_id("https://example.com/?p=20") == derive_id("https://example.com/?p=20")


def test_entry_ids_are_ten_hex_characters():
    entry_id = derive_id("chairs")
    assert len(entry_id) == 10
    assert entry_id == hashlib.sha256(b"chairs").hexdigest()[:10]


def test_full_length_id_for_assets():
    assert derive_id("chairs", length=None) == hashlib.sha256(b"chairs").hexdigest()


def test_different_keys_give_different_ids():
    assert derive_id("chairs") != derive_id("tables")
