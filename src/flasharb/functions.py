from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from web3 import AsyncBaseProvider, AsyncWeb3, Web3
from web3.types import BlockIdentifier, TxParams

from flasharb.exceptions import FlashArbValueError


def function_selector(function_prototype: str) -> bytes:
    """
    Get the 4-byte selector for a function prototype, e.g. 'getPair(address,address)'.
    """

    return keccak(text=function_prototype)[:4]


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> bytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.

    Only flat argument lists are supported. Prototypes with tuple arguments must be encoded with
    `eth_abi` directly.
    """

    if function_arguments is None:
        function_arguments = ()

    return function_selector(function_prototype) + eth_abi.abi.encode(
        types=extract_argument_types_from_function_prototype(function_prototype),
        args=function_arguments,
    )


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype.

    e.g. the argument types for the prototype 'function(address,uint256)' are ['address','uint256']
    """

    if function_args := function_prototype[
        function_prototype.find("(") + 1 : function_prototype.find(")") :
    ]:
        return function_args.split(",")

    return []


def format_units(amount: int, decimals: int) -> Decimal:
    """
    Convert an integer amount of base units into a decimal amount of whole units.
    """

    return Decimal(amount).scaleb(-decimals)


def parse_units(amount: str | Decimal | int, decimals: int) -> int:
    """
    Convert a decimal amount of whole units into an integer amount of base units.

    Raises `FlashArbValueError` if the amount is not a number, or has more precision than the
    token supports.
    """

    try:
        scaled = Decimal(amount).scaleb(decimals)
    except InvalidOperation:
        raise FlashArbValueError(message=f"Invalid amount {amount!r}") from None

    if not scaled.is_finite():
        raise FlashArbValueError(message=f"Invalid amount {amount!r}")
    if scaled != scaled.to_integral_value():
        raise FlashArbValueError(
            message=f"Amount {amount} has more than {decimals} decimal places."
        )
    return int(scaled)


def raw_call(
    w3: Web3,
    address: ChecksumAddress,
    calldata: bytes,
    return_types: list[str],
    block_identifier: BlockIdentifier | None = None,
) -> tuple[Any, ...]:
    """
    Perform an eth_call at the given address and returns the decoded response.
    """

    return eth_abi.abi.decode(
        types=return_types,
        data=w3.eth.call(
            transaction=TxParams(
                to=address,
                data=calldata,
            ),
            block_identifier=block_identifier,
        ),
    )


async def raw_call_async(
    w3: AsyncWeb3[AsyncBaseProvider],
    address: ChecksumAddress,
    calldata: bytes,
    return_types: list[str],
    block_identifier: BlockIdentifier | None = None,
) -> tuple[Any, ...]:
    """
    Async version of raw_call.
    """

    return eth_abi.abi.decode(
        types=return_types,
        data=await w3.eth.call(
            transaction=TxParams(
                to=address,
                data=calldata,
            ),
            block_identifier=block_identifier,
        ),
    )
