"""Sync stage names and persistence of their progress."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

SYNC_STAGE_PROGRESS_TABLE = "SyncStage"
_PRUNE_PREFIX = "prune_"
_MAX_UINT64 = 2**64 - 1


class Getter(Protocol):
    def get_one(self, table: str, key: bytes) -> bytes | None: ...


class Putter(Protocol):
    def put(self, table: str, key: bytes, value: bytes) -> None: ...


class SyncStage(str, Enum):
    """Stages of staged synchronisation; the value is the stored key."""

    SNAPSHOTS = "Snapshots"
    HEADERS = "Headers"
    BOR_HEIMDALL = "BorHeimdall"
    BLOCK_HASHES = "BlockHashes"
    BODIES = "Bodies"
    SENDERS = "Senders"
    DATA_STREAM = "DataStream"
    EXECUTION = "Execution"
    TRANSLATION = "Translation"
    VERKLE_TRIE = "VerkleTrie"
    INTERMEDIATE_HASHES = "IntermediateHashes"
    HASH_STATE = "HashState"
    ACCOUNT_HISTORY_INDEX = "AccountHistoryIndex"
    STORAGE_HISTORY_INDEX = "StorageHistoryIndex"
    LOG_INDEX = "LogIndex"
    CALL_TRACES = "CallTraces"
    TX_LOOKUP = "TxLookup"
    FINISH = "Finish"

    MINING_CREATE_BLOCK = "MiningCreateBlock"
    MINING_BOR_HEIMDALL = "MiningBorHeimdall"
    MINING_EXECUTION = "MiningExecution"
    MINING_FINISH = "MiningFinish"

    BEACON_HISTORY_RECONSTRUCTION = "BeaconHistoryReconstruction"
    BEACON_BLOCKS = "BeaconBlocks"
    BEACON_STATE = "BeaconState"
    BEACON_INDEXES = "BeaconIndexes"

    L1_SYNCER = "L1Syncer"
    L1_SEQUENCER_SYNCER = "L1SequencerSyncer"
    L1_VERIFICATIONS_BATCH_NO = "L1VerificationsBatchNo"
    BATCHES = "Batches"
    HIGHEST_HASHABLE_L2_BLOCK_NO = "HighestHashableL2BlockNo"
    HIGHEST_SEEN_BATCH_NUMBER = "HighestSeenBatchNumber"
    VERIFICATIONS_STATE_ROOT_CHECK = "VerificationStateRootCheck"
    FORK_ID = "ForkId"
    L1_SEQUENCER_SYNC = "L1SequencerSync"
    L1_INFO_TREE = "L1InfoTree"
    SEQUENCE_EXECUTOR_VERIFY = "SequenceExecutorVerify"
    L1_BLOCK_SYNC = "L1BlockSync"
    WITNESS = "Witness"


ALL_STAGES: tuple[SyncStage, ...] = (
    SyncStage.SNAPSHOTS,
    SyncStage.HEADERS,
    SyncStage.BOR_HEIMDALL,
    SyncStage.BLOCK_HASHES,
    SyncStage.BODIES,
    SyncStage.SENDERS,
    SyncStage.EXECUTION,
    SyncStage.TRANSLATION,
    SyncStage.HASH_STATE,
    SyncStage.INTERMEDIATE_HASHES,
    SyncStage.ACCOUNT_HISTORY_INDEX,
    SyncStage.STORAGE_HISTORY_INDEX,
    SyncStage.LOG_INDEX,
    SyncStage.CALL_TRACES,
    SyncStage.TX_LOOKUP,
    SyncStage.FINISH,
)


def _name(stage: SyncStage | str) -> str:
    return stage.value if isinstance(stage, SyncStage) else stage


def _key(stage: SyncStage | str, prefix: str = "") -> bytes:
    return (prefix + _name(stage)).encode()


def encode_progress(value: int) -> bytes:
    """Encode a block number as 8 big-endian bytes."""
    if not 0 <= value <= _MAX_UINT64:
        raise ValueError(f"progress must fit in an unsigned 64-bit integer, got {value}")
    return value.to_bytes(8, "big")


def decode_progress(data: bytes | None) -> int:
    """Decode stored progress; empty or missing data means 0."""
    if not data:
        return 0
    if len(data) < 8:
        raise ValueError(f"value must be at least 8 bytes, got {len(data)}")
    return int.from_bytes(data[:8], "big")


def get_stage_progress(db: Getter, stage: SyncStage | str) -> int:
    return decode_progress(db.get_one(SYNC_STAGE_PROGRESS_TABLE, _key(stage)))


def save_stage_progress(db: Putter, stage: SyncStage | str, progress: int) -> None:
    db.put(SYNC_STAGE_PROGRESS_TABLE, _key(stage), encode_progress(progress))


def get_stage_data(db: Getter, stage: SyncStage | str) -> bytes | None:
    return db.get_one(SYNC_STAGE_PROGRESS_TABLE, _key(stage))


def save_stage_data(db: Putter, stage: SyncStage | str, data: bytes) -> None:
    db.put(SYNC_STAGE_PROGRESS_TABLE, _key(stage), data)


def get_stage_prune_progress(db: Getter, stage: SyncStage | str) -> int:
    return decode_progress(db.get_one(SYNC_STAGE_PROGRESS_TABLE, _key(stage, _PRUNE_PREFIX)))


def save_stage_prune_progress(db: Putter, stage: SyncStage | str, progress: int) -> None:
    db.put(SYNC_STAGE_PROGRESS_TABLE, _key(stage, _PRUNE_PREFIX), encode_progress(progress))