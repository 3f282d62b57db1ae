from theorg_crawler.fetchers.retry import capped_retry, unbounded_transient_retry


def test_unbounded_transient_retry_never_gives_up():
    policy = unbounded_transient_retry(delay=30)
    assert policy.is_unbounded
    assert policy.allows(1)
    assert policy.allows(10_000)
    assert policy.describe(7) == "7/unbounded"


def test_unbounded_transient_retry_can_be_capped_by_operator():
    policy = unbounded_transient_retry(delay=30, max_retries=2)
    assert not policy.is_unbounded
    assert policy.allows(2)
    assert not policy.allows(3)


def test_capped_retry():
    policy = capped_retry(3, delay=30)
    assert policy.name == "capped_retry"
    assert policy.delay == 30
    assert [policy.allows(n) for n in range(1, 5)] == [True, True, True, False]
    assert policy.describe(2) == "2/3"
