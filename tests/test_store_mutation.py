"""Tests for numeric and array read-modify-write operations."""

import math

import pytest

from codersdb import (
    CodersDB,
    InvalidAmountError,
    InvalidDataError,
    InvalidKeyError,
    InvalidOperatorError,
    MissingElementError,
    NotAnArrayError,
    NotANumberError,
)


class TestAdd:
    """Tests for add (seeds missing values with 0)."""

    @pytest.mark.asyncio
    async def test_add_on_missing_key_seeds_zero(self, db: CodersDB) -> None:
        """add on a fresh key behaves as if the value were 0."""
        assert await db.add("x", 5) == 5
        assert await db.get("x") == 5

    @pytest.mark.asyncio
    async def test_add_accumulates(self, db: CodersDB) -> None:
        """Repeated adds accumulate."""
        await db.add("x", 5)
        assert await db.add("x", 2.5) == 7.5

    @pytest.mark.asyncio
    async def test_add_replaces_non_number(self, db: CodersDB) -> None:
        """A non-number stored value counts as 0."""
        await db.set("x", "text")
        assert await db.add("x", 3) == 3

    @pytest.mark.asyncio
    async def test_add_treats_bool_as_non_number(self, db: CodersDB) -> None:
        """Stored booleans are not numbers."""
        await db.set("flag", True)
        assert await db.add("flag", 1) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["5", None, True, [1]])
    async def test_add_rejects_non_number_amount(self, db: CodersDB, amount) -> None:
        """Amounts must be int or float."""
        with pytest.raises(InvalidAmountError):
            await db.add("x", amount)
        assert await db.has("x") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [math.inf, -math.inf])
    async def test_add_rejects_infinity(self, db: CodersDB, amount) -> None:
        """Infinite amounts are rejected."""
        with pytest.raises(InvalidDataError):
            await db.add("x", amount)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [10**400, -(10**400)])
    async def test_add_rejects_int_beyond_float_range(self, db: CodersDB, amount) -> None:
        """Ints too large for a float are rejected like infinity."""
        with pytest.raises(InvalidDataError):
            await db.add("x", amount)
        assert await db.has("x") is False

    @pytest.mark.asyncio
    async def test_add_accepts_nan(self, db: CodersDB) -> None:
        """NaN amounts are accepted."""
        assert math.isnan(await db.add("x", math.nan))

    @pytest.mark.asyncio
    async def test_add_invalid_key(self, db: CodersDB) -> None:
        """Key validation runs before amount validation."""
        with pytest.raises(InvalidKeyError):
            await db.add("", "not a number")


class TestSubtract:
    """Tests for subtract (no seeding)."""

    @pytest.mark.asyncio
    async def test_subtract_on_missing_key_raises(self, db: CodersDB) -> None:
        """subtract does not create entries."""
        with pytest.raises(NotANumberError) as exc_info:
            await db.subtract("x", 1)

        assert exc_info.value.context["stored_type"] == "undefined"
        assert await db.has("x") is False

    @pytest.mark.asyncio
    async def test_subtract_on_non_number_raises(self, db: CodersDB) -> None:
        """subtract requires a stored number."""
        await db.set("x", [1])
        with pytest.raises(NotANumberError):
            await db.subtract("x", 1)
        assert await db.get("x") == [1]

    @pytest.mark.asyncio
    async def test_subtract(self, db: CodersDB) -> None:
        """subtract writes the difference."""
        await db.set("x", 10)
        assert await db.subtract("x", 3) == 7
        assert await db.get("x") == 7

    @pytest.mark.asyncio
    async def test_subtract_rejects_non_number_amount(self, db: CodersDB) -> None:
        """Amount validation happens before the stored value is read."""
        with pytest.raises(InvalidAmountError):
            await db.subtract("x", "3")


class TestMath:
    """Tests for the generalized math operation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "start, operator, amount, expected",
        [
            (12, "+", 3, 15),
            (12, "-", 3, 9),
            (12, "*", 3, 36),
            (12, "/", 3, 4),
            (12, "%", 5, 2),
            (-7, "%", 3, -1),
            (7, "%", -3, 1),
            (-7.5, "%", 2, -1.5),
        ],
    )
    async def test_operators(self, db: CodersDB, start, operator, amount, expected) -> None:
        """Each operator applies to the stored value; % keeps the dividend's sign."""
        await db.set("x", start)
        assert await db.math("x", amount, operator) == expected
        assert await db.get("x") == expected

    @pytest.mark.asyncio
    async def test_huge_stored_int(self, db: CodersDB) -> None:
        """Int arithmetic on a huge stored value works; float overflow is rejected."""
        await db.set("x", 10**400)
        assert await db.math("x", 1, "+") == 10**400 + 1

        with pytest.raises(InvalidDataError):
            await db.math("x", 0.5, "*")
        with pytest.raises(InvalidDataError):
            await db.subtract("x", 0.5)
        assert await db.get("x") == 10**400 + 1

    @pytest.mark.asyncio
    async def test_division_by_zero_does_not_raise(self, db: CodersDB) -> None:
        """Dividing by zero yields infinity, stored and read back."""
        await db.set("x", 8)
        assert await db.math("x", 4, "/") == 2

        result = await db.math("x", 0, "/")
        assert result == math.inf
        assert await db.get("x") == math.inf

    @pytest.mark.asyncio
    async def test_division_by_zero_sign_and_nan(self, db: CodersDB) -> None:
        """Negative and zero dividends follow float semantics."""
        await db.set("neg", -3)
        assert await db.math("neg", 0, "/") == -math.inf

        await db.set("zero", 0)
        assert math.isnan(await db.math("zero", 0, "/"))

    @pytest.mark.asyncio
    async def test_modulo_by_zero_is_nan(self, db: CodersDB) -> None:
        """Modulo by zero yields NaN."""
        await db.set("x", 7)
        assert math.isnan(await db.math("x", 0, "%"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operator", ["^", "**", "", None, "//"])
    async def test_invalid_operator(self, db: CodersDB, operator) -> None:
        """Unsupported operators are rejected before reading."""
        with pytest.raises(InvalidOperatorError):
            await db.math("missing", 1, operator)

    @pytest.mark.asyncio
    async def test_math_on_missing_key_raises(self, db: CodersDB) -> None:
        """math never seeds a default."""
        with pytest.raises(NotANumberError):
            await db.math("x", 1, "+")
        assert await db.has("x") is False


class TestPushPull:
    """Tests for array push (seeding) and pull (strict)."""

    @pytest.mark.asyncio
    async def test_push_on_missing_key(self, db: CodersDB) -> None:
        """push on a fresh key yields a one-element list."""
        assert await db.push("tags", "a") == ["a"]
        assert await db.push("tags", {"b": 1}) == ["a", {"b": 1}]
        assert await db.get("tags") == ["a", {"b": 1}]

    @pytest.mark.asyncio
    async def test_push_replaces_non_list(self, db: CodersDB) -> None:
        """A non-list stored value is replaced by a fresh list."""
        await db.set("tags", "oops")
        assert await db.push("tags", 1) == [1]

    @pytest.mark.asyncio
    async def test_push_none_element(self, db: CodersDB) -> None:
        """None is a valid element, an omitted element is not."""
        assert await db.push("tags", None) == [None]
        with pytest.raises(MissingElementError):
            await db.push("tags")

    @pytest.mark.asyncio
    async def test_pull_on_missing_key_raises(self, db: CodersDB) -> None:
        """pull never seeds a default."""
        with pytest.raises(NotAnArrayError):
            await db.pull("tags", "a")
        assert await db.has("tags") is False

    @pytest.mark.asyncio
    async def test_pull_on_non_list_raises(self, db: CodersDB) -> None:
        """pull requires a stored list."""
        await db.set("tags", {"a": 1})
        with pytest.raises(NotAnArrayError):
            await db.pull("tags", "a")

    @pytest.mark.asyncio
    async def test_pull_removes_first_occurrence(self, db: CodersDB) -> None:
        """Only the first matching element is removed."""
        await db.set("tags", ["a", "b", "a"])
        assert await db.pull("tags", "a") == ["b", "a"]
        assert await db.get("tags") == ["b", "a"]

    @pytest.mark.asyncio
    async def test_pull_missing_element_leaves_list(self, db: CodersDB) -> None:
        """Pulling an absent element writes the list back unchanged."""
        await db.set("tags", [1, 2])
        assert await db.pull("tags", 3) == [1, 2]

    @pytest.mark.asyncio
    async def test_pull_does_not_match_containers_by_content(self, db: CodersDB) -> None:
        """Dicts and lists are never found by content."""
        await db.set("items", [{"id": 1}, [1, 2]])
        assert await db.pull("items", {"id": 1}) == [{"id": 1}, [1, 2]]
        assert await db.pull("items", [1, 2]) == [{"id": 1}, [1, 2]]

    @pytest.mark.asyncio
    async def test_pull_is_type_strict(self, db: CodersDB) -> None:
        """Booleans do not match numbers and strings do not match numbers."""
        await db.set("items", [1, "1", True])
        assert await db.pull("items", True) == [1, "1"]
        assert await db.pull("items", "1") == [1]
        assert await db.pull("items", 1.0) == []

    @pytest.mark.asyncio
    async def test_pull_without_element(self, db: CodersDB) -> None:
        """Omitting the element is an error."""
        await db.set("tags", [1])
        with pytest.raises(MissingElementError):
            await db.pull("tags")
