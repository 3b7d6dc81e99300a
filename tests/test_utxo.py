import dataclasses

import pytest

from bimavault.utxo import Utxo, UtxoStorage


def test_utxo_creation():
    txid = bytes([1, 2, 3, 4])
    script = bytes([5, 6, 7, 8])
    utxo = Utxo(txid, 0, 100, script)
    assert utxo.txid == txid
    assert utxo.vout == 0
    assert utxo.value == 100
    assert utxo.script == script


def test_utxo_accepts_lists():
    utxo = Utxo([1, 2, 3, 4], 0, 100, [5, 6, 7, 8])
    assert utxo.txid == bytes([1, 2, 3, 4])
    assert utxo.script == bytes([5, 6, 7, 8])


def test_utxo_is_immutable():
    utxo = Utxo(b"\x01", 0, 100, b"")
    with pytest.raises(dataclasses.FrozenInstanceError):
        utxo.value = 5
    assert utxo.value == 100


def test_store_and_get():
    storage = UtxoStorage()
    utxo = Utxo(b"\x01\x02", 3, 100, b"\x05")
    storage.store_utxo(b"\x01\x02", 3, utxo)
    assert storage.get(b"\x01\x02", 3) == utxo
    assert storage.get(b"\x01\x02", 4) is None
    assert len(storage) == 1
    assert (b"\x01\x02", 3) in storage


def test_store_replaces():
    storage = UtxoStorage()
    first = Utxo(b"\x01", 0, 100, b"")
    second = Utxo(b"\x01", 0, 200, b"")
    storage.store_utxo(b"\x01", 0, first)
    storage.store_utxo(b"\x01", 0, second)
    assert len(storage) == 1
    assert storage.get(b"\x01", 0) == second


def test_remove():
    storage = UtxoStorage()
    utxo = Utxo(b"\x01", 0, 100, b"")
    storage.store_utxo(b"\x01", 0, utxo)
    assert storage.remove_utxo(b"\x01", 0) == utxo
    assert len(storage) == 0
    assert storage.remove_utxo(b"\x01", 0) is None


def test_iteration_lists_stored():
    storage = UtxoStorage()
    a = Utxo(b"\x01", 0, 1, b"")
    b = Utxo(b"\x01", 1, 2, b"")
    storage.store_utxo(a.txid, a.vout, a)
    storage.store_utxo(b.txid, b.vout, b)
    assert sorted(u.value for u in storage) == [1, 2]