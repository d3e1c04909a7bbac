import pytest

from mlsping.mls import MLS, main

PRIMITIVE_WIDTHS = [2, 3, 4, 5, 6, 7, 9, 10, 11]


@pytest.mark.parametrize("nbits", PRIMITIVE_WIDTHS)
def test_length_and_balance(nbits):
    seq = MLS(nbits).get_seq(1)
    assert len(seq) == (1 << nbits) - 1
    assert sum(seq) == 1 << (nbits - 1)


@pytest.mark.parametrize("nbits", [3, 4, 5, 6, 7])
def test_every_nonzero_window_appears_once(nbits):
    seq = MLS(nbits).get_seq(1)
    length = len(seq)
    windows = {
        tuple(seq[(start + k) % length] for k in range(nbits)) for start in range(length)
    }
    assert len(windows) == length
    assert tuple([False] * nbits) not in windows


@pytest.mark.parametrize("seed", [1, 5, 144, 1000])
def test_sequence_starts_with_seed_bits(seed):
    gen = MLS(10)
    seq = gen.get_seq(seed)
    assert seq[:10] == [bool((seed >> i) & 1) for i in range(10)]


def test_default_seed_is_one():
    gen = MLS(5)
    assert gen.get_seq() == gen.get_seq(1)


def test_bits_are_clamped():
    assert MLS(1).nbits == 2
    assert MLS(1).size() == 3
    assert MLS(40).nbits == 32
    assert MLS(40).size() == 2**32 - 1


def test_set_bits_changes_size():
    gen = MLS(4)
    gen.set_bits(6)
    assert gen.size() == 63
    assert len(gen.get_seq(3)) == 63


def test_zero_seed_is_rejected():
    with pytest.raises(ValueError):
        MLS(4).get_seq(0)
    with pytest.raises(ValueError):
        MLS(4).get_seq(16)


def test_aes_sequence_is_rotation_of_reference():
    reference = MLS(6).get_seq(1)
    seq = MLS(6, use_aes=True).get_seq()
    assert len(seq) == len(reference)
    doubled = reference + reference
    assert any(doubled[k : k + len(seq)] == seq for k in range(len(reference)))


def test_main_prints_sequence(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    line = [l for l in out.splitlines() if l.startswith("Sequence #1: ")][0]
    bits = line[len("Sequence #1: ") :].split()
    assert len(bits) == 1023
    assert set(bits) <= {"0", "1"}
    assert bits == ["1" if b else "0" for b in MLS(10).get_seq(144)]