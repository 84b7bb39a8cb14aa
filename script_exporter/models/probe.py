from __future__ import annotations

from dataclasses import dataclass

from starlette.datastructures import QueryParams


def first_value(query: QueryParams, name: str) -> str:
    """First value of a repeated query parameter, "" when absent."""
    values = query.getlist(name)
    return values[0] if values else ""


@dataclass(frozen=True, slots=True)
class ProbeRequest:
    """Parameters of one /probe call.

    script: registered script name (may be empty; the handler rejects it)
    prefix: metric name prefix, already suffixed with "_" when set
    args: values appended to the command line, in the order ``params``
          listed their names
    ignore_output: ``output=ignore`` was requested

    A repeated parameter contributes its first value.
    """

    script: str
    prefix: str = ""
    args: tuple[str, ...] = ()
    ignore_output: bool = False

    @classmethod
    def from_query(cls, query: QueryParams) -> ProbeRequest:
        prefix = first_value(query, "prefix")
        if prefix:
            prefix = f"{prefix}_"

        args: tuple[str, ...] = ()
        param_names = first_value(query, "params")
        if param_names:
            # A listed name with no matching query parameter contributes "".
            args = tuple(first_value(query, name) for name in param_names.split(","))

        return cls(
            script=first_value(query, "script"),
            prefix=prefix,
            args=args,
            ignore_output=first_value(query, "output") == "ignore",
        )
