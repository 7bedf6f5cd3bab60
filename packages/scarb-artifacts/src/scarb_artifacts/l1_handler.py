"""Dispatch an L1 to L2 message into a contract's `#[l1_handler]` entry point.

The handler selector is the Starknet Keccak of the function name, and the
L1 sender address is passed to the handler as the first calldata element.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar

from Crypto.Hash import keccak

FIELD_PRIME = 2**251 + 17 * 2**192 + 1
MASK_250 = 2**250 - 1

R_co = TypeVar("R_co", covariant=True)


class ExecutionContext(Protocol[R_co]):
    """Executes an L1 handler call against contract state."""

    def call_l1_handler(
        self,
        contract_address: int,
        entry_point_selector: int,
        calldata: list[int],
    ) -> R_co:
        """Call the L1 handler `entry_point_selector` of `contract_address`."""
        ...


def felt_to_bytes(value: int) -> bytes:
    """Minimal big-endian encoding of a field element (zero encodes as one byte)."""
    if not 0 <= value < FIELD_PRIME:
        raise ValueError(f"{value} is not a valid field element")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def short_string_to_felt(text: str) -> int:
    """Encode an ASCII string of at most 31 characters as a field element."""
    if len(text) > 31:
        raise ValueError(f"short string {text!r} is longer than 31 characters")
    return int.from_bytes(text.encode("ascii"), "big")


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 of `data` truncated to 250 bits."""
    digest = keccak.new(digest_bits=256, data=data).digest()
    return int.from_bytes(digest, "big") & MASK_250


def l1_handler_execute(
    context: ExecutionContext[R_co],
    contract_address: int,
    function_name: int,
    from_address: int,
    payload: Sequence[int],
) -> R_co:
    """Call an L1 handler as if a message arrived from L1.

    Args:
        context: Execution context performing the call.
        contract_address: Address of the L2 contract.
        function_name: Handler name encoded as a field element.
        from_address: L1 sender address.
        payload: Message payload.

    Returns:
        Whatever the execution context returns for the call.
    """
    selector = starknet_keccak(felt_to_bytes(function_name))
    calldata = [from_address, *payload]
    return context.call_l1_handler(contract_address, selector, calldata)
