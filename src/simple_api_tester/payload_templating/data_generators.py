"""Generated values for request payloads: fake people and places, random strings, dates."""

from __future__ import annotations

import string
from datetime import datetime

from faker import Faker

from simple_api_tester.harness_errors import ErrorKind, HarnessError

ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits
SLASHED_DATE_TIME_FORMAT = "%m/%d/%Y %H:%M"
ISO_DATE_FORMAT = "%Y-%m-%d"
SQL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ISO_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class DataGenerator:
    """Faker-backed values for payload fields; pass `seed` for repeatable data."""

    def __init__(self, *, locale: str | None = None, seed: int | None = None) -> None:
        self._faker = Faker(locale)
        if seed is not None:
            self._faker.seed_instance(seed)

    @property
    def faker(self) -> Faker:
        return self._faker

    def number_between(self, minimum: int, maximum: int) -> int:
        """Random integer in `[minimum, maximum)`; `minimum` when the range is empty."""
        if maximum <= minimum:
            return minimum
        return self._faker.random_int(min=minimum, max=maximum - 1)

    def first_name(self) -> str:
        return self._faker.first_name()

    def last_name(self) -> str:
        return self._faker.last_name()

    def full_name(self) -> str:
        return self._faker.name()

    def email(self) -> str:
        return self._faker.email()

    def street_address(self) -> str:
        return self._faker.street_address()

    def city(self) -> str:
        return self._faker.city()

    def country(self) -> str:
        return self._faker.country()

    def job_title(self) -> str:
        return self._faker.job()

    def alphanumeric(self, length: int) -> str:
        if length <= 0:
            return ""
        return "".join(self._faker.random_choices(elements=tuple(ALPHANUMERIC), length=length))

    def numeric_string(self, minimum: int, maximum: int) -> str:
        """Random integer in `[minimum, maximum]` as text."""
        if maximum < minimum:
            raise ValueError(f"maximum {maximum} is below minimum {minimum}")
        return str(self._faker.random_int(min=minimum, max=maximum))


def convert_date(value: str, input_format: str = SLASHED_DATE_TIME_FORMAT) -> str:
    """Reformat `value` (parsed with `input_format`) as `YYYY-MM-DD`."""
    return _parse(value, input_format).strftime(ISO_DATE_FORMAT)


def format_timestamp(value: str) -> str:
    """Turn a `YYYY-MM-DD HH:MM:SS` database timestamp into `YYYY-MM-DDTHH:MM:SS`."""
    return _parse(value, SQL_TIMESTAMP_FORMAT).strftime(ISO_TIMESTAMP_FORMAT)


def _parse(value: str, input_format: str) -> datetime:
    try:
        return datetime.strptime(value.strip(), input_format)
    except ValueError as exc:
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Date '{value}' does not match format '{input_format}'."
        ) from exc
