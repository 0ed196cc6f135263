from nmxact.nmble.profile import (
    CHR_PROP_INDICATE,
    CHR_PROP_NOTIFY,
    Characteristic,
    ChrId,
    Descriptor,
    Profile,
    Service,
    find_dsc_by_uuid,
)

CCCD = 0x2902


def _profile():
    c1 = Characteristic(uuid="c1", def_handle=2, val_handle=3,
                        properties=CHR_PROP_NOTIFY)
    c2 = Characteristic(uuid="c2", def_handle=4, val_handle=5,
                        properties=CHR_PROP_INDICATE)
    svc = Service(uuid="s1", start_handle=1, end_handle=10, chrs=[c1, c2])
    p = Profile()
    p.set_services([svc])
    return p, svc, c1, c2


def test_subscribe_type_prefers_notify():
    both = Characteristic(uuid=1, properties=CHR_PROP_NOTIFY | CHR_PROP_INDICATE)
    assert both.subscribe_type() == CHR_PROP_NOTIFY


def test_subscribe_type_indicate_and_none():
    assert Characteristic(uuid=1, properties=CHR_PROP_INDICATE).subscribe_type() \
        == CHR_PROP_INDICATE
    assert Characteristic(uuid=1, properties=0x02).subscribe_type() == 0


def test_find_chr_by_uuid():
    p, _, c1, c2 = _profile()
    assert p.find_chr_by_uuid(ChrId("s1", "c1")) is c1
    assert p.find_chr_by_uuid(ChrId("s1", "c2")) is c2
    assert p.find_chr_by_uuid(ChrId("s2", "c1")) is None


def test_find_chr_by_handle():
    p, _, c1, _ = _profile()
    assert p.find_chr_by_handle(3) is c1
    assert p.find_chr_by_handle(2) is None


def test_set_services_replaces_tables():
    p, svc, _, _ = _profile()
    assert p.services() == [svc]
    p.set_services([])
    assert p.services() == []
    assert p.find_chr_by_handle(3) is None


def test_find_dsc_by_uuid():
    d = Descriptor(uuid=CCCD, handle=4)
    chr_ = Characteristic(uuid="c", dscs=[Descriptor(uuid=0x2901, handle=3), d])
    assert find_dsc_by_uuid(chr_, CCCD) is d
    assert find_dsc_by_uuid(chr_, 0x1234) is None


def test_characteristic_str_is_uuid():
    assert str(Characteristic(uuid="abcd")) == "abcd"