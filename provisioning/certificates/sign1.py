"""
COSE_Sign1 Message Model

Single-signer signed messages (RFC 8152 Section 4.2):

    COSE_Sign1 = #6.18([
        protected : bstr .cbor header_map,
        unprotected : header_map,
        payload : bstr,
        signature : bstr
    ])

The signature covers the Sig_structure
    ["Signature1", protected, external_aad, payload]

Decoding accepts encoded bytes, a decoded CBOR tag or the bare 4-element
array, so callers can hand over whatever their transport layer produced.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Union

import cbor2

from provisioning.core.errors import CborError, CborErrorReason
from provisioning.core.types import COSE_SIGN1_TAG, HEADER_ALGORITHM, SIGNATURE1_CONTEXT, CborType


def encode_protected_header(header: Dict[int, Any]) -> bytes:
    """Serialize a protected header map (empty map -> empty bstr)."""
    if not header:
        return b""
    return cbor2.dumps({int(label): value for label, value in header.items()})


def decode_protected_header(protected: bytes) -> Dict[Any, Any]:
    """
    Parse a serialized protected header.

    Raises:
        CborError: DESERIALIZATION_ERROR if it is not a CBOR map
    """
    if not protected:
        return {}
    try:
        header = cbor2.loads(protected)
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise CborError("Failed to decode protected header") from e
    if not isinstance(header, Mapping):
        raise CborError(
            "Protected header is not a map",
            CborErrorReason.DESERIALIZATION_ERROR,
            field="protected",
            expected=CborType.MAP,
            actual=CborType.of(header),
        )
    return dict(header)


def build_sig_structure(protected: bytes, payload: bytes, external_aad: bytes = b"") -> bytes:
    """Encode the Sig_structure signed by a COSE_Sign1."""
    return cbor2.dumps([SIGNATURE1_CONTEXT, protected, external_aad, payload])


@dataclass(frozen=True)
class Sign1Message:
    """
    Immutable COSE_Sign1 message.

    Attributes:
        protected: Serialized protected header
        unprotected: Unprotected header map
        payload: Signed content (an encoded COSE key for certificates)
        signature: Signature over the Sig_structure
    """

    protected: bytes
    unprotected: Dict[Any, Any] = field(default_factory=dict, compare=False)
    payload: bytes = b""
    signature: bytes = b""

    @property
    def protected_header(self) -> Dict[Any, Any]:
        return decode_protected_header(self.protected)

    @property
    def algorithm(self) -> Optional[int]:
        """Algorithm identifier from the protected header, if present."""
        return self.protected_header.get(HEADER_ALGORITHM)

    def to_be_signed(self, external_aad: bytes = b"") -> bytes:
        return build_sig_structure(self.protected, self.payload, external_aad)

    def to_cbor(self) -> cbor2.CBORTag:
        """Decoded-object form: CBOR tag 18 around the 4-element array."""
        return cbor2.CBORTag(
            COSE_SIGN1_TAG,
            [self.protected, dict(self.unprotected), self.payload, self.signature],
        )

    def encode(self) -> bytes:
        return cbor2.dumps(self.to_cbor())

    @classmethod
    def decode(cls, data: Union[bytes, cbor2.CBORTag, Sequence, "Sign1Message"]) -> "Sign1Message":
        """
        Decode a COSE_Sign1 message.

        Args:
            data: Encoded bytes, CBORTag(18, [...]) or the bare array

        Returns:
            Sign1Message: Parsed message

        Raises:
            CborError: DESERIALIZATION_ERROR for anything that is not a
                well-formed COSE_Sign1
        """
        if isinstance(data, Sign1Message):
            return data

        if isinstance(data, (bytes, bytearray)):
            try:
                data = cbor2.loads(bytes(data))
            except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
                raise CborError("Failed to decode COSE_Sign1") from e

        if isinstance(data, cbor2.CBORTag):
            if data.tag != COSE_SIGN1_TAG:
                raise CborError(
                    "Unexpected CBOR tag for COSE_Sign1",
                    CborErrorReason.DESERIALIZATION_ERROR,
                    field="tag",
                    expected=COSE_SIGN1_TAG,
                    actual=data.tag,
                )
            data = data.value

        if not isinstance(data, (list, tuple)) or len(data) != 4:
            raise CborError(
                "COSE_Sign1 must be a 4-element array",
                CborErrorReason.DESERIALIZATION_ERROR,
                field="message",
                expected=CborType.ARRAY,
                actual=CborType.of(data),
            )

        protected, unprotected, payload, signature = data
        _require(protected, CborType.BYTE_STRING, "protected")
        _require(unprotected, CborType.MAP, "unprotected")
        _require(payload, CborType.BYTE_STRING, "payload")
        _require(signature, CborType.BYTE_STRING, "signature")

        # Reject malformed protected headers at decode time
        decode_protected_header(bytes(protected))

        return cls(
            protected=bytes(protected),
            unprotected=dict(unprotected),
            payload=bytes(payload),
            signature=bytes(signature),
        )


def _require(value, expected: CborType, name: str) -> None:
    if CborType.of(value) is not expected:
        raise CborError(
            f"COSE_Sign1 {name} has unexpected type",
            CborErrorReason.DESERIALIZATION_ERROR,
            field=name,
            expected=expected,
            actual=CborType.of(value),
        )
