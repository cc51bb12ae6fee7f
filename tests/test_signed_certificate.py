"""
Test suite for COSE_Sign1 public-key certificates

Covers:
- COSE_Sign1 structure and codec
- Certificate signing and verification (EdDSA and ES256)
- Expected-key pinning
- Strict extraction of certified keys
- CryptoProvider algorithm selection
"""

import threading
from types import MappingProxyType

import cbor2
import pytest
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from provisioning.certificates import (
    CryptoProvider,
    EdDSA,
    Sign1Message,
    build_sig_structure,
    encode_protected_header,
    extract_ed25519_public,
    extract_x25519_public,
    get_default_provider,
    sign_public_key,
    verify_certificate,
)
from provisioning.core import (
    CborError,
    CborErrorReason,
    CoseKey,
    CryptoError,
    CryptoErrorReason,
    KeyLabel,
    encode_ed25519_public,
    encode_p256_public,
    encode_x25519_public,
    public_key_to_raw,
)


def _resign(certificate, signing_key, **overrides):
    """Certify a modified copy of certificate's payload key"""
    params = CoseKey.decode(certificate.payload).to_dict()
    for label, value in overrides.items():
        params[int(KeyLabel[label.upper()])] = value
    return CryptoProvider().sign(cbor2.dumps(params), signing_key)


class TestSign1Message:
    """Test the COSE_Sign1 codec"""

    def test_structure(self, device_cert):
        """Test tag 18 with a 4-element array"""
        decoded = cbor2.loads(device_cert.encode())
        assert isinstance(decoded, cbor2.CBORTag)
        assert decoded.tag == 18
        assert len(decoded.value) == 4

    def test_protected_header(self, device_cert):
        """Test protected header is {1: -8}"""
        assert cbor2.loads(device_cert.protected) == {1: -8}
        assert device_cert.algorithm == -8

    def test_encode_decode(self, device_cert):
        """Test decoding bytes and the tag object"""
        assert Sign1Message.decode(device_cert.encode()) == device_cert
        assert Sign1Message.decode(device_cert.to_cbor()) == device_cert

    def test_untagged_array(self, device_cert):
        """Test the bare array form is accepted"""
        assert Sign1Message.decode(device_cert.to_cbor().value) == device_cert

    def test_read_only_unprotected_header(self, device_cert):
        """Test tag contents decoded as immutable containers"""
        protected, _, payload, signature = device_cert.to_cbor().value
        tag = cbor2.CBORTag(18, (protected, MappingProxyType({4: b"kid"}), payload, signature))

        message = Sign1Message.decode(tag)
        assert message.unprotected == {4: b"kid"}
        assert type(message.unprotected) is dict
        assert message == device_cert

    def test_decoded_tag_verifies(self, root_cert, device_cert):
        """Test messages decoded by cbor2 from the wire verify"""
        assert verify_certificate(cbor2.loads(root_cert.encode()), cbor2.loads(device_cert.encode()))

    def test_sig_structure(self, device_cert):
        """Test Sig_structure layout"""
        structure = cbor2.loads(device_cert.to_be_signed())
        assert structure == ["Signature1", device_cert.protected, b"", device_cert.payload]
        assert device_cert.to_be_signed() == build_sig_structure(
            device_cert.protected, device_cert.payload
        )

    def test_wrong_tag(self, device_cert):
        """Test tag other than 18"""
        data = cbor2.dumps(cbor2.CBORTag(98, device_cert.to_cbor().value))
        with pytest.raises(CborError) as exc_info:
            Sign1Message.decode(data)
        assert exc_info.value.field == "tag"

    def test_wrong_length(self, device_cert):
        """Test 3-element array"""
        with pytest.raises(CborError):
            Sign1Message.decode(device_cert.to_cbor().value[:3])

    def test_payload_not_bytes(self, device_cert):
        """Test payload given as text"""
        value = list(device_cert.to_cbor().value)
        value[2] = "payload"
        with pytest.raises(CborError) as exc_info:
            Sign1Message.decode(value)
        assert exc_info.value.reason == CborErrorReason.DESERIALIZATION_ERROR
        assert exc_info.value.field == "payload"

    def test_protected_not_a_map(self, device_cert):
        """Test protected header that encodes an array"""
        value = list(device_cert.to_cbor().value)
        value[0] = cbor2.dumps([1, -8])
        with pytest.raises(CborError):
            Sign1Message.decode(value)

    def test_garbage(self):
        """Test bytes that are not CBOR"""
        with pytest.raises(CborError):
            Sign1Message.decode(b"\x84\x40")


class TestSignAndVerify:
    """Test certificate signing and verification"""

    def test_verify(self, root_cert, device_cert, provider):
        """Test root-signed certificate verifies"""
        assert verify_certificate(root_cert, device_cert, provider=provider) is True

    def test_verify_encoded(self, root_cert, device_cert):
        """Test verification from encoded bytes with the default provider"""
        assert verify_certificate(root_cert.encode(), device_cert.encode()) is True

    def test_payload_is_public_cose_key(self, device_cert, device_keypair):
        """Test certificate payload is the device COSE key"""
        payload = CoseKey.decode(device_cert.payload)
        assert payload == encode_x25519_public(device_keypair.public_key)
        assert not payload.has_private()

    def test_private_parameter_not_certified(self, root_signing_key, device_keypair):
        """Test d of a COSE key is stripped before signing"""
        params = encode_x25519_public(device_keypair.public_key).to_dict()
        params[KeyLabel.D] = b"\x42" * 32

        certificate = sign_public_key(root_signing_key, params)
        assert int(KeyLabel.D) not in cbor2.loads(certificate.payload)

    def test_expected_key(self, root_cert, device_cert, device_keypair):
        """Test pinning the certified key by COSE key and by key object"""
        assert verify_certificate(
            root_cert, device_cert, expected_key=encode_x25519_public(device_keypair.public_key)
        )
        assert verify_certificate(root_cert, device_cert, expected_key=device_keypair.public_key)

    def test_expected_key_encoded(self, root_cert, device_cert, device_keypair, server_keypair):
        """Test pinning the certified key by its CBOR encoding"""
        encoded = encode_x25519_public(device_keypair.public_key).encode()
        assert verify_certificate(root_cert, device_cert, expected_key=encoded)

        with pytest.raises(CryptoError) as exc_info:
            verify_certificate(
                root_cert,
                device_cert,
                expected_key=encode_x25519_public(server_keypair.public_key).encode(),
            )
        assert exc_info.value.reason == CryptoErrorReason.VERIFICATION_FAILURE

    def test_expected_key_mismatch(self, root_cert, device_cert, server_keypair):
        """Test valid signature over another key raises"""
        with pytest.raises(CryptoError) as exc_info:
            verify_certificate(root_cert, device_cert, expected_key=server_keypair.public_key)

        assert exc_info.value.reason == CryptoErrorReason.VERIFICATION_FAILURE
        assert exc_info.value.field == "x"

    def test_altered_signature(self, root_cert, device_cert):
        """Test flipped signature bit returns False"""
        signature = bytearray(device_cert.signature)
        signature[0] ^= 0x01
        tampered = Sign1Message(
            protected=device_cert.protected,
            payload=device_cert.payload,
            signature=bytes(signature),
        )
        assert verify_certificate(root_cert, tampered) is False

    def test_altered_payload(self, root_cert, device_cert, server_keypair):
        """Test swapped payload returns False"""
        tampered = Sign1Message(
            protected=device_cert.protected,
            payload=encode_x25519_public(server_keypair.public_key).encode(),
            signature=device_cert.signature,
        )
        assert verify_certificate(root_cert, tampered) is False

    def test_other_signer(self, root_cert, other_signing_key, device_keypair):
        """Test certificate signed by an unrelated key returns False"""
        certificate = sign_public_key(other_signing_key, device_keypair.public_key)
        assert verify_certificate(root_cert, certificate) is False

    def test_malformed_certificate(self, root_cert):
        """Test undecodable certificate raises a decode error"""
        with pytest.raises(CborError) as exc_info:
            verify_certificate(root_cert, b"\xff\x00")
        assert exc_info.value.reason == CborErrorReason.DESERIALIZATION_ERROR

    def test_verifying_payload_not_a_key(self, root_signing_key, device_cert):
        """Test verifying certificate whose payload is not a map"""
        verifying = CryptoProvider().sign(cbor2.dumps(1), root_signing_key)
        with pytest.raises(CborError):
            verify_certificate(verifying, device_cert)

    def test_verifying_key_wrong_curve(self, root_cert, device_cert):
        """Test an X25519 key cannot verify EdDSA"""
        with pytest.raises(CryptoError) as exc_info:
            verify_certificate(device_cert, root_cert)
        assert exc_info.value.reason == CryptoErrorReason.VERIFICATION_FAILURE

    def test_unsupported_algorithm(self, root_cert, device_cert):
        """Test protected header with an unknown algorithm"""
        message = Sign1Message(
            protected=encode_protected_header({1: -35}),
            payload=device_cert.payload,
            signature=device_cert.signature,
        )
        with pytest.raises(CryptoError) as exc_info:
            verify_certificate(root_cert, message)

        assert exc_info.value.reason == CryptoErrorReason.VERIFICATION_FAILURE
        assert exc_info.value.__cause__.reason == CryptoErrorReason.NO_SUCH_ALGORITHM

    def test_unsupported_signing_key(self, device_keypair):
        """Test X25519 keys cannot sign"""
        with pytest.raises(CryptoError) as exc_info:
            sign_public_key(X25519PrivateKey.generate(), device_keypair.public_key)
        assert exc_info.value.reason == CryptoErrorReason.SIGNING_FAILURE

    def test_unencodable_target(self, root_signing_key):
        """Test target that is not a key"""
        with pytest.raises(CryptoError) as exc_info:
            sign_public_key(root_signing_key, "device key")
        assert exc_info.value.reason == CryptoErrorReason.SIGNING_FAILURE


class TestES256:
    """Test the P-256 signature path"""

    def test_sign_and_verify(self, p256_private_key, device_keypair):
        """Test ES256 certificate against a P-256 verifying certificate"""
        root = sign_public_key(p256_private_key, p256_private_key.public_key())
        certificate = sign_public_key(p256_private_key, device_keypair.public_key)

        assert certificate.algorithm == -7
        assert len(certificate.signature) == 64
        assert verify_certificate(root, certificate) is True

    def test_verifying_key_without_algorithm(self, p256_private_key, root_signing_key, device_keypair):
        """Test verifying key that omits alg"""
        params = encode_p256_public(p256_private_key.public_key()).to_dict()
        del params[KeyLabel.ALG]
        root = CryptoProvider().sign(cbor2.dumps(params), root_signing_key)
        certificate = sign_public_key(p256_private_key, device_keypair.public_key)

        assert verify_certificate(root, certificate) is True

    def test_eddsa_only_provider(self, p256_private_key, device_keypair):
        """Test a provider without ES256 cannot verify it"""
        provider = CryptoProvider([EdDSA()])
        root = sign_public_key(p256_private_key, p256_private_key.public_key())
        certificate = sign_public_key(p256_private_key, device_keypair.public_key)

        with pytest.raises(CryptoError) as exc_info:
            verify_certificate(root, certificate, provider=provider)
        assert exc_info.value.reason == CryptoErrorReason.VERIFICATION_FAILURE


class TestCryptoProvider:
    """Test algorithm lookup"""

    def test_supported_algorithms(self, provider):
        """Test default provider supports ES256 and EdDSA"""
        assert provider.supported_algorithms == [-8, -7]

    def test_get_unknown(self):
        """Test lookup of an algorithm the provider lacks"""
        with pytest.raises(CryptoError) as exc_info:
            CryptoProvider([EdDSA()]).get(-7)
        assert exc_info.value.reason == CryptoErrorReason.NO_SUCH_ALGORITHM

    def test_get_non_integer(self, provider):
        """Test boolean is not an algorithm identifier"""
        with pytest.raises(CryptoError):
            provider.get(True)

    def test_default_provider_singleton(self):
        """Test default provider is created once across threads"""
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(get_default_provider()))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result is results[0] for result in results)
        assert get_default_provider() is results[0]


class TestExtraction:
    """Test strict extraction of certified keys"""

    def test_extract_x25519(self, device_cert, device_keypair):
        """Test X25519 key recovered from certificate"""
        public_key = extract_x25519_public(device_cert.encode())
        assert public_key_to_raw(public_key) == device_keypair.public_bytes

    def test_extract_ed25519(self, root_cert, root_signing_key):
        """Test Ed25519 key recovered from certificate"""
        public_key = extract_ed25519_public(root_cert)
        assert public_key_to_raw(public_key) == public_key_to_raw(root_signing_key.public_key())

    def test_ed25519_from_x25519_certificate(self, device_cert):
        """Test curve mismatch is reported as such"""
        with pytest.raises(CborError) as exc_info:
            extract_ed25519_public(device_cert)

        assert exc_info.value.reason == CborErrorReason.INCORRECT_COSE_TYPE
        assert exc_info.value.field == "crv"

    def test_x25519_from_ed25519_certificate(self, root_cert):
        """Test Ed25519 payload is not an X25519 key"""
        with pytest.raises(CborError) as exc_info:
            extract_x25519_public(root_cert)

        assert exc_info.value.reason == CborErrorReason.INCORRECT_COSE_TYPE
        assert exc_info.value.field == "crv"

    def test_wrong_algorithm(self, device_cert, root_signing_key):
        """Test X25519 curve with EdDSA algorithm"""
        certificate = _resign(device_cert, root_signing_key, alg=-8)
        with pytest.raises(CborError) as exc_info:
            extract_x25519_public(certificate)
        assert exc_info.value.field == "alg"

    def test_wrong_key_type(self, device_cert, root_signing_key):
        """Test kty EC2 with X25519 curve"""
        certificate = _resign(device_cert, root_signing_key, kty=2)
        with pytest.raises(CborError) as exc_info:
            extract_x25519_public(certificate)
        assert exc_info.value.field == "kty"

    def test_curve_type_mismatch(self, device_cert, root_signing_key):
        """Test crv encoded as a byte string"""
        certificate = _resign(device_cert, root_signing_key, crv=b"\x04")
        with pytest.raises(CborError) as exc_info:
            extract_x25519_public(certificate)
        assert exc_info.value.reason == CborErrorReason.TYPE_MISMATCH

    def test_ed25519_self_signed_root(self, root_signing_key):
        """Test Ed25519 COSE key payload round trip"""
        root = sign_public_key(root_signing_key, encode_ed25519_public(root_signing_key.public_key()))
        assert verify_certificate(root, root)
