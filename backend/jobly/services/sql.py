"""
SQL fragment builders.

Both builders turn a mapping of request fields into a parameterized SQL
fragment plus the list of values for its $n placeholders. They never put a
caller-supplied value into the SQL text itself; only column names from the
fixed tables below are interpolated.
"""
import enum
import logging
from typing import Any, Mapping, NamedTuple, Optional, Union

from pydantic import TypeAdapter, ValidationError

from jobly.errors import BadRequestError

logger = logging.getLogger(__name__)

_BOOL_ADAPTER = TypeAdapter(bool)


class SetClause(NamedTuple):
    """Column assignments for an UPDATE ... SET and their values."""
    set_cols: str
    values: list


class WhereClause(NamedTuple):
    """A WHERE clause ("" when unfiltered) and its values."""
    where_clause: str
    values: list

    @property
    def conditions(self) -> str:
        """The filter conditions without the leading WHERE, for use in a join's ON clause."""
        if not self.where_clause:
            return ""
        return self.where_clause[len("WHERE "):]


class FilterTable(str, enum.Enum):
    """Tables that can be filtered from a query string."""
    COMPANIES = "companies"
    JOBS = "jobs"


class ValueKind(enum.Enum):
    """How a raw filter value becomes a SQL condition."""
    TEXT = "text"  # trimmed, wrapped in %...% for ILIKE
    INTEGER = "integer"
    BOOLEAN = "boolean"  # not parameterized


class FilterField(enum.Enum):
    """Every (table, query field) pair that can be filtered on."""
    COMPANY_NAME_LIKE = (FilterTable.COMPANIES, "nameLike", "name", "ILIKE", ValueKind.TEXT)
    COMPANY_MIN_EMPLOYEES = (FilterTable.COMPANIES, "minEmployees", "num_employees", ">=", ValueKind.INTEGER)
    COMPANY_MAX_EMPLOYEES = (FilterTable.COMPANIES, "maxEmployees", "num_employees", "<=", ValueKind.INTEGER)
    JOB_TITLE = (FilterTable.JOBS, "title", "title", "ILIKE", ValueKind.TEXT)
    JOB_MIN_SALARY = (FilterTable.JOBS, "minSalary", "salary", ">=", ValueKind.INTEGER)
    JOB_HAS_EQUITY = (FilterTable.JOBS, "hasEquity", "equity", ">", ValueKind.BOOLEAN)

    def __init__(self, table: FilterTable, field_name: str, column: str, comparison: str, kind: ValueKind):
        self.table = table
        self.field_name = field_name
        self.column = column
        self.comparison = comparison
        self.kind = kind

    @classmethod
    def lookup(cls, table: FilterTable, field_name: str) -> "FilterField":
        """Find the field for a table, or raise BadRequestError if it cannot be filtered on."""
        for member in cls:
            if member.table is table and member.field_name == field_name:
                return member
        raise BadRequestError(f"Filtering '{table.value}' by '{field_name}' is not possible.")


def sql_for_partial_update(
    data_to_update: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None
) -> SetClause:
    """
    Build the SET clause for a partial update.

    Args:
        data_to_update: Field name -> new value, in the order the columns
            should appear. Values are not validated here.
        js_to_sql: Field name -> column name, only for fields whose column
            name differs. Entries for fields not being updated are ignored.

    Returns:
        SetClause, e.g. for {"firstName": "Aliya", "age": 32} with
        {"firstName": "first_name"}:
            set_cols = '"first_name"=$1, "age"=$2'
            values = ["Aliya", 32]

    Raises:
        BadRequestError: If there is nothing to update.
    """
    if not data_to_update:
        raise BadRequestError("No data")

    js_to_sql = js_to_sql or {}
    cols = [
        f'"{js_to_sql.get(field_name, field_name)}"=${idx}'
        for idx, field_name in enumerate(data_to_update, start=1)
    ]

    return SetClause(set_cols=", ".join(cols), values=list(data_to_update.values()))


def _to_int(field_name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise BadRequestError(f"Filter value for '{field_name}' must be an integer.")
    try:
        return int(str(value).strip())
    except ValueError:
        raise BadRequestError(f"Filter value for '{field_name}' must be an integer.")


def _to_bool(field_name: str, value: Any) -> bool:
    try:
        return _BOOL_ADAPTER.validate_python(value)
    except ValidationError:
        raise BadRequestError(f"Filter value for '{field_name}' must be true or false.")


def _check_employee_range(data_for_filter: Mapping[str, Any]) -> None:
    if "minEmployees" not in data_for_filter or "maxEmployees" not in data_for_filter:
        return

    min_employees = data_for_filter["minEmployees"]
    max_employees = data_for_filter["maxEmployees"]
    if _to_int("maxEmployees", max_employees) <= _to_int("minEmployees", min_employees):
        raise BadRequestError(
            f"Filter is incorrect: 'minEmployees', {min_employees}, "
            f"is NOT less than 'maxEmployees', {max_employees}."
        )


def sql_for_filter(
    data_for_filter: Optional[Mapping[str, Any]],
    table: Union[FilterTable, str]
) -> WhereClause:
    """
    Build the WHERE clause for a filtered SELECT.

    Fields are handled in the mapping's iteration order, which fixes both the
    order of the conditions and the $n numbering. Conditions that take no
    value (hasEquity) do not use up a placeholder number.

    Args:
        data_for_filter: Query field -> raw value (usually a query-string
            string). None or empty means no filtering.
        table: "companies" or "jobs".

    Returns:
        WhereClause, e.g. for {"nameLike": "net ", "minEmployees": "5"} on
        companies:
            where_clause = "WHERE name ILIKE $1 AND num_employees >= $2"
            values = ["%net%", 5]

    Raises:
        BadRequestError: Unknown field for the table, a value that cannot be
            coerced, or maxEmployees <= minEmployees.
    """
    table = FilterTable(table)

    if not data_for_filter:
        return WhereClause(where_clause="", values=[])

    if table is FilterTable.COMPANIES:
        _check_employee_range(data_for_filter)

    conditions = []
    values = []
    for field_name, raw_value in data_for_filter.items():
        field = FilterField.lookup(table, field_name)

        if field.kind is ValueKind.BOOLEAN:
            if _to_bool(field_name, raw_value):
                conditions.append(f"{field.column} {field.comparison} 0")
            else:
                # false means "any equity", which includes jobs with none recorded
                conditions.append(f"(({field.column} >= 0) OR ({field.column} IS NULL))")
            continue

        if field.kind is ValueKind.TEXT:
            values.append(f"%{str(raw_value).strip()}%")
        elif field.kind is ValueKind.INTEGER:
            values.append(_to_int(field_name, raw_value))
        else:
            raise BadRequestError(f"Filtering '{table.value}' by '{field_name}' is not possible.")

        conditions.append(f"{field.column} {field.comparison} ${len(values)}")

    logger.debug(f"Filter on {table.value}: {conditions} {values}")

    return WhereClause(where_clause=f"WHERE {' AND '.join(conditions)}", values=values)
