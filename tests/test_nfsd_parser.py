import logging
import os
import pytest

from nfsd_exporter.ingestion.parser import (
    NFSdStatsParser, ReadAheadCache, StatSnapshot, StatsUnavailable, parse_nfsd_stats, snapshot_to_dict,
)
from nfsd_exporter.collector.nfsd import NFSdCollector
from nfsd_exporter.ingestion.procfs import ProcFS


def test_parse_full_legacy_kernel_file(proc_root):
    snap = ProcFS(proc_root).read_nfsd_stats()
    assert (snap.reply_cache.hits, snap.reply_cache.misses, snap.reply_cache.nocache) == (10, 2, 1)
    assert snap.file_handles.stale == 0
    assert (snap.input_output.read, snap.input_output.write) == (1000, 500)
    assert snap.threads.threads == 8 and snap.threads.full_cnt == 0
    assert snap.read_ahead_cache.cache_size == 32
    assert snap.read_ahead_cache.not_found == 3
    assert len(snap.read_ahead_cache.cache_histogram) == 10
    assert (snap.network.net_count, snap.network.udp_count, snap.network.tcp_count, snap.network.tcp_connect) == (150, 100, 50, 7)
    assert snap.server_rpc.rpc_count == 18628


def test_parse_procedure_lines(proc_root):
    snap = ProcFS(proc_root).read_nfsd_stats()
    assert set(snap.procedures) == {'proc2', 'proc3', 'proc4', 'proc4ops'}
    assert len(snap.procedures['proc3']) == 22
    assert snap.procedures['proc4'] == (2, 10853)
    assert snap.procedures['proc4ops'][2] == 1098


def test_modern_kernel_missing_groups_decode_as_zero(modern_proc_root):
    snap = ProcFS(modern_proc_root).read_nfsd_stats()
    # no 'ra' line at all
    assert snap.read_ahead_cache == ReadAheadCache()
    # single-field 'fh' line
    assert snap.file_handles.stale == 4
    assert snap.file_handles.total_lookups == 0
    assert snap.threads.threads == 16
    assert 'proc2' not in snap.procedures


def test_unknown_lines_are_skipped():
    snap = parse_nfsd_stats("rc 1 2 3\nwdeleg_getattr 7\nnewthing a b c\n")
    assert snap.reply_cache.hits == 1
    assert snap.network.tcp_count == 0


def test_counters_accept_full_uint64_range():
    snap = parse_nfsd_stats("io 18446744073709551615 0\n")
    assert snap.input_output.read == 18446744073709551615


@pytest.mark.parametrize('field', [
    '9' * 400,
    '18446744073709551616',
    '1_000',
    '+5',
    '-1',
    '\u0663',
], ids=['400-digits', 'uint64-overflow', 'underscore', 'plus-sign', 'negative', 'arabic-indic-digit'])
def test_counters_outside_procfs_format_are_rejected(field):
    with pytest.raises(ValueError):
        parse_nfsd_stats(f"rc 1 2 3\nio {field} 5\n")


def test_oversized_counter_emits_nothing(write_nfsd):
    root = write_nfsd("rc 1 2 3\nfh 0 0 0 0 0\nio " + "9" * 400 + " 5\n")
    out = []
    with pytest.raises(StatsUnavailable):
        NFSdCollector(ProcFS(root)).update(out.append)
    assert out == []


@pytest.mark.parametrize('text', [
    '',
    '\n\n',
    'bogus 1 2\n',
    'rc 1 2\n',
    'io 1 x\n',
    'net 1 2 3\n',
    'ra 32 0 0 0\n',
    'proc3 22 1 2 3\n',
    'fh\n',
], ids=['empty', 'blank', 'only-unknown', 'rc-short', 'io-nonint', 'net-short', 'ra-short', 'proc-count-mismatch', 'fh-empty'])
def test_malformed_text_raises_value_error(text):
    with pytest.raises(ValueError):
        NFSdStatsParser(text).parse()


def test_missing_file_raises_stats_unavailable(tmp_path):
    fs = ProcFS(str(tmp_path))
    with pytest.raises(StatsUnavailable) as ei:
        fs.read_nfsd_stats()
    assert ei.value.path == os.path.join(str(tmp_path), 'net', 'rpc', 'nfsd')
    assert isinstance(ei.value.__cause__, OSError)
    assert 'failed to retrieve nfsd stats' in str(ei.value)


def test_malformed_file_raises_stats_unavailable(write_nfsd):
    root = write_nfsd("rc 1 2 three\n")
    with pytest.raises(StatsUnavailable) as ei:
        ProcFS(root).read_nfsd_stats()
    assert isinstance(ei.value.__cause__, ValueError)


def test_snapshot_to_dict_is_json_friendly(proc_root):
    import json
    out = snapshot_to_dict(ProcFS(proc_root).read_nfsd_stats())
    assert out['threads']['threads'] == 8
    assert out['read_ahead_cache']['cache_histogram'] == [0] * 10
    assert out['procedures']['proc4'] == [2, 10853]
    json.dumps(out)


def test_default_snapshot_is_all_zero():
    snap = StatSnapshot()
    assert snap.network.udp_count == 0 and snap.threads.threads == 0 and snap.procedures == {}


def test_parser_trace_channel_is_separate_from_verbose(monkeypatch, caplog):
    monkeypatch.delenv('DEBUG_VERBOSE', raising=False)
    monkeypatch.setenv('DEBUG_NFSD_PARSER', '1')
    with caplog.at_level(logging.INFO, logger='nfsd_exporter'):
        parse_nfsd_stats("rc 1 2 3\nnewthing 4\n")
    assert '[parser] line=rc 1 2 3' in caplog.text
    # unknown-line skips go to the verbose channel only
    assert 'skip_unknown_line' not in caplog.text
