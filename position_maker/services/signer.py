"""订单构造与签名。

订单哈希为以下字段按顺序 ABI packed 编码后的 keccak256：

    (makerAddress, makerAmount, makerToken, takerAddress, takerAmount, takerToken, expiration, nonce)
    (address,      uint256,     address,    address,      uint256,     address,    uint256,    uint256)

签名对 32 字节哈希做 EIP-191 personal_sign，拆分为 (v, r, s)。给定订单与私钥，
哈希与签名逐字节可复现，对手方可据此验签。
"""

from __future__ import annotations

import secrets
import time
from typing import Callable, Optional

from eth_account import Account
from eth_account.datastructures import SignedMessage
from eth_account.messages import encode_defunct
from web3 import Web3

from ..types import Order, SignedOrder

ORDER_FIELD_TYPES = ["address", "uint256", "address", "address", "uint256", "address", "uint256", "uint256"]

MessageSigner = Callable[[bytes], SignedMessage]


def order_hash(order: Order) -> bytes:
    values = [
        Web3.to_checksum_address(order.maker_address),
        int(order.maker_amount),
        Web3.to_checksum_address(order.maker_token),
        Web3.to_checksum_address(order.taker_address),
        int(order.taker_amount),
        Web3.to_checksum_address(order.taker_token),
        int(order.expiration),
        int(order.nonce),
    ]
    return bytes(Web3.solidity_keccak(ORDER_FIELD_TYPES, values))


def key_signer(private_key: str) -> MessageSigner:
    """基于本地私钥构造消息签名函数。"""
    account = Account.from_key(private_key)

    def _sign(data: bytes) -> SignedMessage:
        return account.sign_message(encode_defunct(primitive=data))

    return _sign


def sign_order(order: Order, signer: MessageSigner) -> SignedOrder:
    """计算订单哈希并签名，返回附带 (v, r, s) 的 `SignedOrder`。"""
    digest = order_hash(order)
    signed = signer(digest)
    return SignedOrder(
        order=order,
        v=int(signed.v),
        r=_hex32(signed.r),
        s=_hex32(signed.s),
        order_hash=Web3.to_hex(digest),
    )


def recover_signer(signed: SignedOrder) -> str:
    """从签名恢复签名者地址（小写）。"""
    digest = order_hash(signed.order)
    vrs = (signed.v, int(signed.r, 16), int(signed.s, 16))
    return Account.recover_message(encode_defunct(primitive=digest), vrs=vrs).lower()


def new_nonce() -> int:
    return secrets.randbelow(2**64)


def build_order(
    *,
    maker_address: str,
    maker_amount: int,
    maker_token: str,
    taker_address: str,
    taker_amount: int,
    taker_token: str,
    ttl_seconds: int = 300,
    now: Optional[int] = None,
    nonce: Optional[int] = None,
) -> Order:
    """构造待签名订单：过期时间为当前时间加 ttl，nonce 为伪随机数（不保证全局唯一）。"""
    issued_at = int(time.time()) if now is None else int(now)
    return Order(
        maker_address=maker_address.lower(),
        maker_amount=int(maker_amount),
        maker_token=maker_token.lower(),
        taker_address=taker_address.lower(),
        taker_amount=int(taker_amount),
        taker_token=taker_token.lower(),
        expiration=issued_at + ttl_seconds,
        nonce=new_nonce() if nonce is None else int(nonce),
    )


def _hex32(value: int) -> str:
    return "0x" + int(value).to_bytes(32, "big").hex()


__all__ = ["ORDER_FIELD_TYPES", "order_hash", "key_signer", "sign_order", "recover_signer", "build_order", "new_nonce"]
