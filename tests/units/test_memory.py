from io import StringIO

from tracemem.core.memory import Memory, memory_cost_of


def decode_hex(s):
    return bytes.fromhex(s)


WORD = decode_hex("11223344556677889900aabbccddeeff11223344556677889900aabbccddeeff")


def test_empty():
    M = Memory()
    assert M.size() == 0
    assert M.memory_cost() == 0
    assert M.origin(0) is None


def test_extend():
    M = Memory()
    M.extend(0, 32)
    assert M.size() == 32
    M.extend(0, 33)
    assert M.size() == 64
    M.extend(10, 10)
    assert M.size() == 64, "Memory shrunk"
    M.extend(0, 64)
    assert M.size() == 64
    M.extend(100, 1)
    assert M.size() == 128
    assert M.read(0, 128) == bytes(128), "Extension did not zero the memory"


def test_store_simple():
    M = Memory()
    M.store(0, 32, decode_hex("00" * 31 + "ff"))
    assert M.read(0, 32) == decode_hex("00" * 31 + "ff")


def test_store_pads_left():
    M = Memory()
    M.store(0, 32, [0xFF])
    assert M.size() == 32
    assert M.read(0, 32) == bytes(31) + b"\xff"


def test_store_truncates():
    M = Memory()
    M.store(0, 2, b"\x01\x02\x03\x04")
    assert M.size() == 32
    assert M.read(0, 4) == b"\x01\x02\x00\x00"


def test_store_offset():
    M = Memory()
    M.store(4, 32, [0xFF])
    assert M.size() == 64
    assert M.read(0, 64) == bytes(35) + b"\xff" + bytes(28)


def test_store_nonstandard_offset():
    M = Memory()
    M.store(34, 32, [0xFF])
    assert M.size() == 96
    assert M.read(0, 96) == bytes(65) + b"\xff" + bytes(30)


def test_store_large_offset():
    M = Memory()
    M.store(255, 32, [0xFF])
    assert M.size() == 288
    assert M.read(286, 1) == b"\xff"
    assert M.read(0, 288) == bytes(286) + b"\xff\x00"


def test_store8():
    M = Memory()
    M.store8(0, 0x1FF)
    assert M.size() == 32
    assert M.read(0, 32) == b"\xff" + bytes(31)


def test_round_trip():
    M = Memory()
    M.store(7, 32, WORD)
    assert M.read(7, 32) == WORD


def test_read_past_end():
    M = Memory()
    M.store(0, 32, WORD)
    assert M.read(1, 32) == WORD[1:] + b"\x00"
    assert M.read(31, 32) == b"\xff" + bytes(31)
    assert M.read(100, 8) == bytes(8)
    assert M.size() == 32, "Read extended the memory"


def test_clamping():
    M = Memory()
    M.store(2**20, 4, b"\xaa\xbb\xcc\xdd")
    # the offset is capped
    assert M.size() == 65536 + 32
    assert M.read(65536, 4) == b"\xaa\xbb\xcc\xdd"
    assert M.read(2**30, 4) == b"\xaa\xbb\xcc\xdd"
    assert len(M.read(0, 2**20)) == 65536, "Read size not capped"

    M = Memory(ceiling=64)
    M.store(0, 1000, b"\x01")
    assert M.size() == 64
    assert M.read(0, 64) == bytes(63) + b"\x01"


def test_memory_cost():
    M = Memory()
    M.store(0, 32, WORD)
    assert M.memory_cost() == 3

    M = Memory()
    M.store(32 * 32, 32, WORD)
    assert M.size() == 33 * 32
    assert M.memory_cost() == 101

    assert memory_cost_of(32 * 32) == 98
    assert memory_cost_of(1) == 3


def test_expansion_cost():
    M = Memory()
    assert M.expansion_cost(0, 32) == 3
    assert M.expansion_cost(32 * 32, 32) == 101

    M.store(0, 32, [0xFF])
    assert M.expansion_cost(0, 32) == 0
    assert M.expansion_cost(0, 64) == 3
    assert M.expansion_cost(0, 1) == 0, "Negative expansion cost"


def test_origin():
    M = Memory()
    M.store_with_opcode(0, 32, WORD, "MSTORE@1")
    M.store(32, 32, WORD)
    assert M.origin(0) == "MSTORE@1"
    assert M.origin(31) == "MSTORE@1"
    assert M.origin(32) is None, "Untracked write was tracked"

    M.store_with_opcode(8, 4, b"\x00", "MSTORE@2")
    assert M.origin(7) == "MSTORE@1"
    assert M.origin(8) == "MSTORE@2"
    assert M.origin(12) == "MSTORE@1"
    assert M.read(8, 4) == bytes(4)

    M.store_with_opcode(0, 32, WORD, "MSTORE@3")
    assert all(M.origin(i) == "MSTORE@3" for i in range(32))
    assert len(M.tracker()) == 1


def test_origin_of_clamped_write():
    M = Memory(ceiling=64)
    M.store_with_opcode(1000, 8, b"\x01", "A")
    assert M.origin(64) == "A"
    assert M.origin(1000) is None


def test_equality_and_dump():
    M = Memory()
    N = Memory()
    assert M == N
    M.store_with_opcode(0, 32, WORD, "A")
    assert M != N
    N.store(0, 32, WORD)
    assert M != N, "Memories with different provenance are equal"
    N.store_with_opcode(0, 32, WORD, "A")
    assert M == N

    out = StringIO()
    M.dump(out)
    assert WORD.hex() in out.getvalue()
    assert "[0, 31] -> A" in out.getvalue()


def test_new_memory_is_untracked():
    M = Memory(ceiling=128)
    assert len(M.tracker()) == 0
    assert M.ceiling() == 128
