"""Action -> simulated kernel response table resolution."""

from __future__ import annotations

from typing import Sequence

from krnl_payload.domain.kernel_catalog import kernel_spec
from krnl_payload.domain.models import KernelResponse, ResponseTable
from krnl_payload.engine._embedded_response_tables import DEFAULT_ACTION, EMBEDDED_RESPONSE_TABLES
from krnl_payload.engine.abi_codec import encode_value


def table_key_for_action(action: str) -> str:
    """Return the embedded table key for ``action``; unknown actions use the default table."""

    if action in EMBEDDED_RESPONSE_TABLES and action != DEFAULT_ACTION:
        return action
    return DEFAULT_ACTION


def resolve_response_table(action: str, kernel_ids: Sequence[int]) -> ResponseTable:
    """Resolve the simulated response table for ``action``.

    Entries follow ``kernel_ids`` order exactly; the verifier matches responses
    positionally against the deployment's kernel list.
    """

    values = EMBEDDED_RESPONSE_TABLES[table_key_for_action(action)]
    table: list[KernelResponse] = []
    for kernel_id in kernel_ids:
        spec = kernel_spec(kernel_id)
        if kernel_id not in values:
            raise KeyError(f"no simulated response for kernel {kernel_id}")
        table.append(
            KernelResponse(
                kernel_id=kernel_id,
                response_data=encode_value(spec.abi_type, values[kernel_id]),
                error_message="",
            )
        )
    return tuple(table)
