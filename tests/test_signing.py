from infrastructure.external.payments.signing import (
    REQUEST_HASH_FIELDS,
    RESPONSE_HASH_FIELDS,
    pick,
    sign,
    sign_fields,
    verify,
)


def test_sign_joins_fields_and_secret_with_pipes():
    # md5("A1|10.00|1700000000|secret")
    assert sign(["A1", "10.00", "1700000000"], "secret") == "3caf47b481ed1013d6111d0590cd8e38"


def test_sign_with_no_fields_hashes_separator_and_secret():
    # md5("|secret")
    assert sign([""], "secret") == "6af6d8ff9ad4a59d213645f57f471e03"


def test_sign_treats_none_as_empty_and_stringifies_values():
    assert sign([None, 1700000000], "k") == sign(["", "1700000000"], "k")


def test_sign_is_order_sensitive():
    assert sign(["a", "b"], "k") != sign(["b", "a"], "k")


def test_verify_accepts_matching_digest_in_any_case():
    digest = sign(["A1", "10.00", "1700000000"], "secret")
    assert verify(["A1", "10.00", "1700000000"], "secret", digest)
    assert verify(["A1", "10.00", "1700000000"], "secret", digest.upper())


def test_verify_rejects_tampered_fields_and_wrong_secret():
    digest = sign(["A1", "10.00", "1700000000"], "secret")
    assert not verify(["A1", "10.01", "1700000000"], "secret", digest)
    assert not verify(["A1", "10.00", "1700000000"], "other", digest)


def test_verify_rejects_missing_candidate():
    assert not verify(["A1"], "secret", None)
    assert not verify(["A1"], "secret", "")


def test_pick_returns_values_in_field_order_with_blanks_for_missing():
    values = {"time": 5, "orderid": "A1"}
    assert pick(values, REQUEST_HASH_FIELDS) == ["A1", "", "5"]


def test_response_fingerprint_covers_avs_and_cvv_flags():
    reply = {
        "orderid": "A1",
        "amount": "10.00",
        "response": "1",
        "transactionid": "txn-1",
        "avsresponse": "",
        "cvvresponse": "",
        "time": "1700000000",
    }
    # md5("A1|10.00|1|txn-1|||1700000000|secret")
    assert sign_fields(reply, RESPONSE_HASH_FIELDS, "secret") == "647ba4d63703bcb252450f9579ed59a3"
    assert sign_fields({**reply, "cvvresponse": "N"}, RESPONSE_HASH_FIELDS, "secret") != (
        "647ba4d63703bcb252450f9579ed59a3"
    )
