from lolbuild.stats import CommandStats


def test_summary_counts():
    stats = CommandStats()
    stats.record("build", 1, 10, True)
    stats.record("build", 2, 10, False, "No build data found")
    stats.record("counter", 1, None, True)

    summary = stats.summary()
    assert summary["total"] == 3
    assert summary["last_hour"] == 3
    assert summary["unique_users"] == 2
    assert summary["success_rate"] == "66.7%"
    assert summary["most_used"][0] == ("build", 2)


def test_per_command_rates():
    stats = CommandStats()
    stats.record("build", 1, None, True)
    stats.record("counter", 1, None, False)

    assert stats.usage_count("build") == 1
    assert stats.success_rate("build") == 100.0
    assert stats.success_rate("counter") == 0.0
    assert stats.success_rate("ping") == 0.0


def test_ring_buffer_is_bounded():
    stats = CommandStats(max_entries=5)
    for i in range(8):
        stats.record("ping", i, None, True)
    assert stats.usage_count() == 5


def test_forget_user():
    stats = CommandStats(max_entries=10)
    stats.record("build", 1, None, True)
    stats.record("build", 2, None, True)
    stats.record("counter", 1, None, True)

    assert stats.forget_user(1) == 2
    assert stats.summary()["unique_users"] == 1
    assert stats.entries.maxlen == 10
