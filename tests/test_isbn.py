"""ISBN 식별자 모듈 테스트"""

import pytest

from catalog.isbn import (
    SENTINEL_ISBN,
    clean,
    format_isbn,
    has_valid_checksum,
    is_sentinel,
    normalize,
    to_isbn10,
    to_isbn13,
    validate,
    variants,
)
from models.book import ISBNError

# 체크 디지트가 올바른 ISBN-10
VALID_ISBN10 = ["0306406152", "0132350882", "080442957X", "0156013983", "0000000000"]


class TestClean:
    """clean 테스트"""

    def test_removes_hyphens_and_spaces(self):
        """하이픈/공백 제거"""
        assert clean("978-0-15-601398-7") == "9780156013987"
        assert clean(" 0 15 601398 7 ") == "0156013987"
        assert clean("978\t0156\n013987") == "9780156013987"

    def test_no_digit_validation(self):
        """숫자 검사 없음"""
        assert clean("abc-def") == "abcdef"
        assert clean("") == ""


class TestValidate:
    """validate 테스트"""

    def test_sentinel_always_valid(self):
        """예약 ISBN은 항상 유효"""
        result = validate("6666666666666")
        assert result.valid is True
        assert result.isbn == SENTINEL_ISBN
        assert validate("666-6666666666", strict=True).valid is True

    def test_invalid_length(self):
        """길이 오류"""
        result = validate("12345")
        assert result.valid is False
        assert result.error == ISBNError.INVALID_LENGTH
        assert result.to_dict() == {
            "valid": False,
            "error": "InvalidLength",
            "message": result.message,
        }

    def test_both_prefixes_accepted(self):
        """978/979 접두사 모두 허용"""
        assert validate("9782707302755").valid is True
        assert validate("979-10-90636-07-1").valid is True

    def test_invalid_prefix(self):
        """ISBN-13 접두사 오류"""
        result = validate("9770156013987")
        assert result.valid is False
        assert result.error == ISBNError.INVALID_PREFIX

    def test_isbn10_with_x(self):
        """ISBN-10 끝자리 X 허용"""
        result = validate("0-8044-2957-X")
        assert result.valid is True
        assert result.isbn == "080442957X"

    def test_invalid_format(self):
        """문자 구성 오류"""
        assert validate("01560139X7").error == ISBNError.INVALID_FORMAT
        assert validate("978015601398X").error == ISBNError.INVALID_FORMAT
        assert validate("080442957x").error == ISBNError.INVALID_FORMAT
        assert validate("abcdefghij").error == ISBNError.INVALID_FORMAT

    def test_non_ascii_digits_rejected(self):
        """전각/아라비아-인도 숫자는 형식 오류"""
        assert validate("\uff10\uff11\uff15\uff16\uff10\uff11\uff13\uff19\uff18\uff13").error == ISBNError.INVALID_FORMAT
        assert validate("978\u0660\u0661\u0665\u0666\u0660\u0661\u0663\u0669\u0668\u0667").error == ISBNError.INVALID_FORMAT

    def test_format_checked_before_prefix(self):
        """문자 오류가 접두사 오류보다 먼저"""
        assert validate("12345678901ab").error == ISBNError.INVALID_FORMAT

    def test_checksum_not_verified_by_default(self):
        """기본 모드는 체크 디지트를 검사하지 않음"""
        assert validate("0156013987").valid is True
        assert validate("9780156013980").valid is True

    def test_strict_checksum(self):
        """strict 모드 체크 디지트 검증"""
        assert validate("0156013983", strict=True).valid is True
        assert validate("9780156013987", strict=True).valid is True
        result = validate("0156013987", strict=True)
        assert result.valid is False
        assert result.error == ISBNError.INVALID_CHECKSUM

    def test_valid_result_dict(self):
        """유효 결과 딕셔너리"""
        assert validate("978-0-15-601398-7").to_dict() == {"valid": True, "isbn": "9780156013987"}


class TestConversion:
    """ISBN-10 ↔ ISBN-13 변환 테스트"""

    def test_to_isbn13(self):
        """ISBN-10 → ISBN-13"""
        assert to_isbn13("0156013987") == "9780156013987"
        assert to_isbn13("0306406152") == "9780306406157"

    def test_to_isbn10(self):
        """ISBN-13 → ISBN-10"""
        isbn10 = to_isbn10("9782401084629")
        assert isbn10 == "2401084622"
        assert to_isbn13(isbn10) == "9782401084629"

    def test_to_isbn10_check_x(self):
        """체크 문자 X"""
        assert to_isbn10(to_isbn13("080442957X")) == "080442957X"

    def test_to_isbn10_check_zero(self):
        """합계가 11의 배수면 체크 문자 0"""
        assert to_isbn10("9780000000002") == "0000000000"

    def test_to_isbn10_979_is_none(self):
        """979 코드는 ISBN-10 없음"""
        assert to_isbn10("9791090636071") is None

    def test_to_isbn10_wrong_length_is_none(self):
        """13자리가 아니면 None"""
        assert to_isbn10("978015601398") is None

    @pytest.mark.parametrize("isbn10", VALID_ISBN10)
    def test_round_trip(self, isbn10):
        """유효한 ISBN-10은 왕복 변환 후 동일"""
        assert to_isbn10(to_isbn13(isbn10)) == isbn10

    def test_malformed_input_does_not_raise(self):
        """검증되지 않은 입력도 예외 없음"""
        assert len(to_isbn13("abcdefghij")) == 13
        assert to_isbn10("978abcdefghij") is not None
        assert to_isbn13("\u00b2" * 10) == "978" + "\u00b2" * 9 + "2"
        assert normalize("\u00b2" * 10) == "978" + "\u00b2" * 9 + "2"


class TestNormalize:
    """normalize 테스트"""

    def test_isbn10_converted(self):
        """10자리는 ISBN-13으로"""
        assert normalize("0-15-601398-7") == "9780156013987"

    def test_isbn13_unchanged(self):
        """13자리는 그대로"""
        assert normalize("979-10-90636-07-1") == "9791090636071"

    def test_sentinel_unchanged(self):
        """예약 ISBN은 그대로"""
        assert normalize("6666666666666") == SENTINEL_ISBN
        assert is_sentinel(" 6666666666666 ")

    def test_anomalous_length_returned_cleaned(self):
        """비정상 길이는 정리만"""
        assert normalize("12-345") == "12345"

    @pytest.mark.parametrize(
        "raw", ["0156013987", "9780156013987", "6666666666666", "12345", "080442957X"]
    )
    def test_idempotent(self, raw):
        """normalize(normalize(x)) == normalize(x)"""
        assert normalize(normalize(raw)) == normalize(raw)


class TestVariants:
    """variants 테스트"""

    def test_isbn13_978_includes_isbn10(self):
        """978 ISBN-13 → ISBN-10 포함"""
        assert variants("978-0-15-601398-7") == ["9780156013987", "0156013983"]

    def test_isbn10_includes_isbn13(self):
        """ISBN-10 → ISBN-13 포함"""
        assert variants("0156013987") == ["0156013987", "9780156013987"]

    def test_979_only_itself(self):
        """979는 변형 없음"""
        assert variants("9791090636071") == ["9791090636071"]

    def test_sentinel_only_itself(self):
        """예약 ISBN은 자기 자신만"""
        assert variants("6666666666666") == [SENTINEL_ISBN]

    @pytest.mark.parametrize("raw", ["0-15-601398-7", "12345", "978 0 15 601398 7", ""])
    def test_first_element_is_clean(self, raw):
        """첫 원소는 항상 clean(raw)"""
        assert variants(raw)[0] == clean(raw)

    def test_no_duplicates(self):
        """중복 없음"""
        result = variants("0156013983")
        assert len(result) == len(set(result))


class TestChecksumAndFormat:
    """체크섬/표시 포맷 테스트"""

    def test_has_valid_checksum(self):
        assert has_valid_checksum("9780156013987") is True
        assert has_valid_checksum("080442957X") is True
        assert has_valid_checksum("0156013987") is False
        assert has_valid_checksum("12345") is False

    def test_format_isbn(self):
        """하이픈 표시 포맷"""
        assert format_isbn("9780156013987") == "978-0-15-601398-7"
        assert format_isbn("0156013983") == "0-15-601398-3"
        assert format_isbn("12-345") == "12345"
