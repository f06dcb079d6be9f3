from resource_sim.timeline import EventLog


def test_unbounded_log_keeps_everything_in_order():
    log = EventLog()
    for index in range(50):
        log.append(kind='tick', index=index)
    records = log.records()
    assert len(records) == 50
    assert [r['step'] for r in records] == list(range(1, 51))


def test_ring_log_drops_oldest_but_keeps_numbering():
    log = EventLog(capacity=3)
    for index in range(5):
        log.append(index=index)
    assert [r['index'] for r in log.records()] == [2, 3, 4]
    assert [r['step'] for r in log.records()] == [3, 4, 5]
    assert log.last()['index'] == 4


def test_latest_and_clear():
    log = EventLog()
    assert log.last() is None
    for index in range(4):
        log.append(index=index)
    assert [r['index'] for r in log.latest(2)] == [2, 3]
    assert len(log.latest()) == 4
    assert log.latest(0) == []
    log.clear()
    assert len(log) == 0
    assert log.append(index=9)['step'] == 1


def test_records_are_copies():
    log = EventLog()
    ready = ['P1']
    log.append(ready=ready)
    ready.append('P2')
    returned = log.records()
    returned[0]['ready'].append('P3')
    assert log.records()[0]['ready'] == ['P1']
