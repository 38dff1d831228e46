from khqrkit.crc import crc16_ccitt, crc_matches, looks_like_checksummed, split_crc


class TestCrc16Ccitt:
    def test_check_value(self):
        # CRC-16/CCITT-FALSE reference check value
        assert crc16_ccitt("123456789") == "29B1"

    def test_empty_string_is_init_value(self):
        assert crc16_ccitt("") == "FFFF"

    def test_zero_padded_uppercase(self):
        result = crc16_ccitt("6304")
        assert len(result) == 4
        assert result == result.upper()


class TestLooksLikeChecksummed:
    def test_accepts_crc_suffix(self):
        assert looks_like_checksummed("00020101021163041A2B")

    def test_accepts_lowercase_hex(self):
        assert looks_like_checksummed("0002010102116304a1b2")

    def test_rejects_missing_crc_tag(self):
        assert not looks_like_checksummed("000201010211ABCD")

    def test_rejects_non_hex(self):
        assert not looks_like_checksummed("0002010102116304XYZ1")

    def test_rejects_too_short(self):
        assert not looks_like_checksummed("63041A2B")


class TestCrcMatches:
    def test_split(self):
        assert split_crc("abcd1234") == ("abcd", "1234")

    def test_matches_case_insensitively(self):
        body = "0002010102116304"
        crc = crc16_ccitt(body)
        assert crc_matches(body + crc)
        assert crc_matches(body + crc.lower())

    def test_mismatch(self):
        body = "0002010102116304"
        crc = crc16_ccitt(body)
        wrong = f"{(int(crc, 16) + 1) & 0xFFFF:04X}"
        assert not crc_matches(body + wrong)
