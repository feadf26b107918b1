from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictFloat


class SumArguments(BaseModel):
    """
    Input shape for the `sum` tool.

    Strict mode accepts JSON numbers (ints widen to float) and rejects numeric
    strings, booleans, nulls and non-finite floats.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    a: StrictFloat = Field(description="First addend.")
    b: StrictFloat = Field(description="Second addend.")


class ConsultPackageJsonArguments(BaseModel):
    """Input shape for `consult_package_json`: an empty object."""

    model_config = ConfigDict(extra="ignore")
