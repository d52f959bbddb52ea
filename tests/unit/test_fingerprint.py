from __future__ import annotations

import pytest

from kvlocker import InvalidArgumentError, fingerprint


class TestFingerprint:
    def test_known_digest(self) -> None:
        # base64(sha256(b"resource"))
        assert fingerprint("resource") == "XelTGfF0Z+1txY5OCxbBGToTs11g3Ei88Gv2t77rvmw="

    def test_is_deterministic(self) -> None:
        assert fingerprint("order:42") == fingerprint("order:42")

    def test_distinct_inputs_give_distinct_keys(self) -> None:
        keys = {fingerprint(f"resource-{i}") for i in range(200)}
        assert len(keys) == 200

    def test_fixed_length(self) -> None:
        # 32-byte digest -> 44 base64 characters
        assert len(fingerprint("a")) == 44
        assert len(fingerprint("x" * 10_000)) == 44

    def test_non_ascii_is_hashed_as_utf8(self) -> None:
        assert fingerprint("κλειδί") != fingerprint("kleidi")

    @pytest.mark.parametrize("value", ["", None, 42, b"bytes", ["a"]])
    def test_rejects_invalid_values(self, value: object) -> None:
        with pytest.raises(InvalidArgumentError):
            fingerprint(value)

    def test_invalid_argument_is_a_value_error(self) -> None:
        with pytest.raises(ValueError, match="falsy"):
            fingerprint("")
