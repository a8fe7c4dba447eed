"""Unit tests for station filtering and boarding detection."""

from conftest import create_test_train
from src.smarta.arrival_filter import BOARDING, detect_boarding, filter_by_station


class TestFilterByStation:
    """Test cases for filter_by_station."""

    def setup_method(self):
        """Set up test fixtures."""
        self.east_lake = create_test_train(station="East Lake", direction="E")
        self.lindbergh = create_test_train(station="Lindbergh Center", direction="S")

    def test_returns_only_matching_station(self):
        """Only the East Lake train is returned."""
        result = filter_by_station([self.east_lake, self.lindbergh], "East Lake")

        assert result == [self.east_lake]

    def test_match_is_case_sensitive(self):
        assert filter_by_station([self.east_lake], "east lake") == []

    def test_whitespace_is_not_normalized(self):
        assert filter_by_station([self.east_lake], "East Lake ") == []

    def test_preserves_feed_order(self):
        first = create_test_train(station="East Lake", direction="E", waiting_time="1 min")
        second = create_test_train(station="East Lake", direction="W", waiting_time="7 min")

        result = filter_by_station([first, self.lindbergh, second], "East Lake")

        assert result == [first, second]

    def test_input_not_mutated(self):
        trains = [self.east_lake, self.lindbergh]

        filter_by_station(trains, "East Lake")

        assert trains == [self.east_lake, self.lindbergh]

    def test_empty_input(self):
        assert filter_by_station([], "East Lake") == []


class TestDetectBoarding:
    """Test cases for detect_boarding."""

    def test_returns_exactly_boarding_trains_in_order(self):
        trains = [
            create_test_train(direction="N", waiting_time=BOARDING),
            create_test_train(direction="S", waiting_time="3 min"),
            create_test_train(direction="E", waiting_time="Arriving"),
            create_test_train(direction="W", waiting_time=BOARDING),
        ]

        result = detect_boarding(trains)

        assert [t.direction for t in result] == ["N", "W"]
        assert all(t.waiting_time == "Boarding" for t in result)

    def test_sentinel_must_match_exactly(self):
        """Near-misses of the sentinel are not boarding."""
        trains = [
            create_test_train(waiting_time="boarding"),
            create_test_train(waiting_time="BOARDING"),
            create_test_train(waiting_time=" Boarding"),
        ]

        assert detect_boarding(trains) == []

    def test_same_input_same_output(self):
        trains = [create_test_train(waiting_time=BOARDING), create_test_train()]

        assert detect_boarding(trains) == detect_boarding(trains)
