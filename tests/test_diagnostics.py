from strata.diagnostics import RANK_TABLE_COLUMNS, log_rank_table, rank_table


class TestRankTable:
    def test_columns(self):
        df = rank_table([{"original_y": 0.0, "rank": 1, "mapped_y": 0.0}])
        assert list(df.columns) == RANK_TABLE_COLUMNS
        assert df.loc[0, "rank"] == 1

    def test_log_table(self):
        lines = []
        log_rank_table(
            [
                {"original_y": 0.0, "rank": 0, "mapped_y": 0.0},
                {"original_y": 40.0, "rank": 2, "mapped_y": 80.0},
            ],
            logfunc=lambda msg, *args: lines.append(msg % args),
        )
        assert len(lines) == 1
        assert "mapped_y" in lines[0]
        assert "80.0" in lines[0]

    def test_log_empty(self):
        lines = []
        log_rank_table([], logfunc=lines.append)
        assert lines == ["Rank alignment: no buckets"]
