import json

from ota.messages import SID_CN, SID_GLOBAL, build_login_form, build_rom_request, encode_request


def test_cn_request_parameters():
    params = build_rom_request("houji", "OS1.0.5.0.UNCCNXM", "14")
    assert params["d"] == params["p"] == params["pn"] == "houji"
    assert params["c"] == "14"
    assert params["ov"] == "OS1.0.5.0.UNCCNXM"
    assert params["v"] == "MIUI-OS1.0.5.0.UNCCNXM"
    assert params["l"] == "zh_CN"
    assert params["r"] == "CN"
    assert params["b"] == "F"
    assert params["id"] == ""
    assert params["unlock"] == "0"


def test_global_codename_switches_locale_and_region():
    params = build_rom_request("houji_global", "OS1.0.3.0.UNCMIXM", "14", user_id="123")
    assert params["l"] == "en_US"
    assert params["r"] == "GL"
    assert params["id"] == "123"


def test_encode_request_is_compact_json():
    text = encode_request({"a": "1", "b": "二"})
    assert text == '{"a":"1","b":"二"}'
    assert json.loads(text) == {"a": "1", "b": "二"}


def test_login_form_service_id():
    assert build_login_form("u", "H")["sid"] == SID_CN
    form = build_login_form("u", "H", global_account=True)
    assert form["sid"] == SID_GLOBAL
    assert form["hash"] == "H"
    assert form["_json"] == "true"
