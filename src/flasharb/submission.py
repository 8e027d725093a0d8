import contextlib
from typing import Protocol

import eth_abi.abi
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception
from web3.types import TxParams, TxReceipt

from flasharb.arbitrage.types import FlashLoanRequest
from flasharb.connection import RPC_CONNECTION_ERRORS
from flasharb.exceptions import RevertError, SubmissionError
from flasharb.functions import function_selector
from flasharb.logging import logger

FLASH_LOAN_PARAMS_TYPE = "(address,uint256,(uint8,bytes,address[])[])"
FLASH_LOAN_FUNCTION_PROTOTYPE = f"executeFlashLoan({FLASH_LOAN_PARAMS_TYPE})"


class FlashLoanSubmitter(Protocol):
    """
    Signs and broadcasts a flash loan request, returning the mined receipt.
    """

    def submit(self, request: FlashLoanRequest) -> TxReceipt: ...


def encode_flash_loan_calldata(request: FlashLoanRequest) -> bytes:
    """
    Encode the call to the flash loan contract: the 4-byte selector, followed by the ABI-encoded
    parameter struct `(address pool, uint256 amount, Hop[] hops)`, where each hop is
    `(uint8 protocol, bytes data, address[] path)`.
    """

    return function_selector(FLASH_LOAN_FUNCTION_PROTOTYPE) + eth_abi.abi.encode(
        types=[FLASH_LOAN_PARAMS_TYPE],
        args=[
            (
                request.pool_id,
                request.loan_amount,
                [(int(hop.venue), hop.data, list(hop.path)) for hop in request.hops],
            )
        ],
    )


class Web3FlashLoanSubmitter:
    """
    Submits flash loan requests through a `Web3` connection, signing locally with the request's
    signer. Each request is broadcast once, and a failure is never retried.
    """

    def __init__(self, w3: Web3, *, receipt_timeout: float = 120) -> None:
        self.w3 = w3
        self.receipt_timeout = receipt_timeout

    def _revert_reason(self, tx: TxParams, receipt: TxReceipt) -> str:
        """
        Replay the transaction as a call at the block it was mined, and extract the revert reason.
        """

        call_params = TxParams(
            {
                "from": tx["from"],
                "to": tx["to"],
                "data": tx["data"],
                "gas": tx["gas"],
                "gasPrice": tx["gasPrice"],
            }
        )
        with contextlib.suppress(Web3Exception):
            try:
                self.w3.eth.call(call_params, block_identifier=receipt["blockNumber"])
            except ContractLogicError as exc:
                return exc.message or str(exc)
        return "unknown reason"

    def submit(self, request: FlashLoanRequest) -> TxReceipt:
        signer = request.signer

        try:
            tx = TxParams(
                {
                    "from": signer.address,
                    "to": request.contract_address,
                    "data": HexBytes(encode_flash_loan_calldata(request)),
                    "value": 0,
                    "gas": request.gas_limit,
                    "gasPrice": request.gas_price,
                    "nonce": self.w3.eth.get_transaction_count(signer.address, "pending"),
                    "chainId": self.w3.eth.chain_id,
                }
            )
            signed_tx = signer.sign_transaction(
                {key: value for key, value in tx.items() if key != "from"}
            )
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except (Web3Exception, *RPC_CONNECTION_ERRORS) as exc:
            raise SubmissionError(message=f"Could not broadcast flash loan: {exc}") from exc

        logger.info(f"Broadcast flash loan transaction {tx_hash.to_0x_hex()}")

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as exc:
            raise SubmissionError(
                message=f"No receipt for {tx_hash.to_0x_hex()} after {self.receipt_timeout}s"
            ) from exc
        except (Web3Exception, *RPC_CONNECTION_ERRORS) as exc:
            raise SubmissionError(
                message=f"Could not fetch receipt for {tx_hash.to_0x_hex()}: {exc}"
            ) from exc

        if receipt["status"] == 0:
            raise RevertError(
                reason=self._revert_reason(tx, receipt),
                tx_hash=tx_hash.to_0x_hex(),
            )

        logger.info(
            f"Flash loan transaction {tx_hash.to_0x_hex()} confirmed in block "
            f"{receipt['blockNumber']}"
        )
        return receipt

