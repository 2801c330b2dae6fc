import base64


def b64encode_str(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def int_to_bytes(value: int, length: int = None) -> bytes:
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, 'big')


def int_to_b64(value: int) -> str:
    # ds:CryptoBinary, big-endian without leading zero octets
    return b64encode_str(int_to_bytes(value))
