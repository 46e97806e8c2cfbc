from tradie_hub.etl.dedup import DedupIndex, identity_of, is_duplicate
from tradie_hub.models import Business


def _business(name, phone=None, external_id=None):
    return Business(id=1, name=name, category="plumber", phone=phone, external_id=external_id)


def test_identity_reads_legacy_keys():
    identity = identity_of({"business_name": "Perth Plumbing ", "phone": "9000 1111", "google_place_id": "pid"})
    assert identity.name == "perth plumbing"
    assert identity.phone == "9000 1111"
    assert identity.external_id == "pid"


def test_phone_placeholder_is_not_a_phone():
    assert identity_of({"name": "A", "phone": "Contact via website"}).phone is None


def test_name_match_is_case_insensitive():
    existing = [{"name": "Metro Plumbing"}]
    assert is_duplicate(existing, _business("METRO plumbing"))


def test_phone_match():
    existing = [{"name": "Metro Plumbing", "phone": "0400 111 222"}]
    assert is_duplicate(existing, _business("Metro Plumbing & Gas", phone="0400 111 222"))


def test_external_id_match_with_different_name_casing():
    existing = [_business("abc electrical", external_id="place-1")]
    assert is_duplicate(existing, _business("ABC ELECTRICAL PTY LTD", external_id="place-1"))


def test_missing_keys_never_match():
    existing = [{"name": "Metro Plumbing", "phone": None, "externalId": None}]
    assert not is_duplicate(existing, _business("Express Plumbing"))
    assert not is_duplicate([{"name": "A", "phone": "Contact via website"}], _business("B", phone="Contact via website"))


def test_index_grows_with_accepted_records():
    index = DedupIndex([{"name": "Dr Sparky", "externalId": "p1"}])
    candidate = _business("Brillare", phone="0411", external_id="p2")

    assert not index.matches(candidate)
    index.add(candidate)
    assert index.matches(_business("Other Name", external_id="p2"))
    assert index.matches(_business("Another", phone="0411"))
