"""Kernel id -> response ABI type registry.

The response type of a kernel is fixed by the kernel itself; every response
table entry for a kernel is encoded with the type registered here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class KernelSpec:
    kernel_id: int
    abi_type: str
    description: str


KERNEL_CATALOG: Final[dict[int, KernelSpec]] = {
    90: KernelSpec(90, "uint256", "Gitcoin Passport getScore (Optimism Sepolia)"),
    91: KernelSpec(91, "bool", "Gitcoin Passport isHuman (Optimism Sepolia)"),
    337: KernelSpec(337, "bool", "Prohibited list screening (Base Sepolia)"),
    340: KernelSpec(340, "bool", "Trusted list (Base Sepolia)"),
    347: KernelSpec(347, "string", "Day and time window (Optimism Sepolia)"),
    883: KernelSpec(883, "uint256", "Mock KYC score (Sepolia)"),
}


def kernel_spec(kernel_id: int) -> KernelSpec:
    try:
        return KERNEL_CATALOG[kernel_id]
    except KeyError:
        raise KeyError(f"kernel {kernel_id} is not registered in the kernel catalog") from None


def unknown_kernel_ids(kernel_ids: tuple[int, ...]) -> list[int]:
    return [kid for kid in kernel_ids if kid not in KERNEL_CATALOG]
