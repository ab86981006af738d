"""
Canned responses and in-memory streams shared by the tests
"""

import io

OK_200 = b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"
BAD_400 = b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n"


def memory_stream(data: bytes):
    """(reader, writer) pair: responses come from data, requests go to a BytesIO"""
    return io.BytesIO(data), io.BytesIO()
