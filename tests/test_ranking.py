import pytest

from donorfinder.errors import NotFoundError, RepositoryError
from donorfinder.models.domain import Coordinate, DonorCandidate
from donorfinder.persistence.results import InMemoryResultStore
from donorfinder.services.filtering import DonorFilter
from donorfinder.services.ranking import RankingPipeline


def _donor(name: str, lat, lon, score: float = 5.0) -> DonorCandidate:
    return DonorCandidate(
        name=name,
        mobile_number="9000000000",
        address=f"{name} street",
        blood_group="O+",
        latitude=lat,
        longitude=lon,
        behavior_score=score,
    )


class DummyResolver:
    def __init__(self, coordinate=None, error=None):
        self.coordinate = coordinate
        self.error = error
        self.calls = []

    def resolve(self, postal_code):
        self.calls.append(postal_code)
        if self.error:
            raise self.error
        return self.coordinate


class DummyRepository:
    def __init__(self, donors):
        self.donors = donors
        self.calls = []

    def find(self, blood_group, min_score):
        self.calls.append((blood_group, min_score))
        return list(self.donors)


class RecordingStore(InMemoryResultStore):
    def __init__(self, fail_on_insert: bool = False):
        super().__init__()
        self.operations = []
        self.fail_on_insert = fail_on_insert

    def ensure(self):
        self.operations.append("ensure")

    def clear(self):
        self.operations.append("clear")
        super().clear()

    def insert_many(self, donors):
        self.operations.append("insert")
        if self.fail_on_insert:
            raise RepositoryError("insert failed", stage="results")
        super().insert_many(donors)

    def read_sorted(self):
        self.operations.append("read")
        return super().read_sorted()


BANGALORE = Coordinate(latitude=12.9716, longitude=77.5946)


def _pipeline(donors, resolver=None, store=None):
    repository = DummyRepository(donors)
    pipeline = RankingPipeline(
        resolver=resolver or DummyResolver(BANGALORE),
        donor_filter=DonorFilter(repository, threshold=4.8),
        result_store=store or RecordingStore(),
    )
    return pipeline, repository


def test_skips_donor_without_coordinates():
    pipeline, repository = _pipeline([_donor("Donor A", None, None, 4.9), _donor("Donor B", 13.0, 77.6, 5.0)])

    donors = pipeline.run("560001", "O+")

    assert repository.calls == [("O+", 4.8)]
    assert [donor.name for donor in donors] == ["Donor B"]
    assert 3.1 < donors[0].distance_km < 3.4


def test_output_sorted_nearest_first():
    pipeline, _ = _pipeline(
        [
            _donor("Far", 13.3, 77.9),
            _donor("Near", 12.972, 77.595),
            _donor("Mid", 13.0, 77.6),
        ]
    )

    donors = pipeline.run("560001", "O+")

    assert [donor.name for donor in donors] == ["Near", "Mid", "Far"]
    distances = [donor.distance_km for donor in donors]
    assert all(a <= b for a, b in zip(distances, distances[1:]))


def test_duplicate_coordinates_are_both_returned():
    pipeline, _ = _pipeline([_donor("Twin 1", 13.0, 77.6), _donor("Twin 2", 13.0, 77.6)])

    donors = pipeline.run("560001", "O+")

    assert sorted(donor.name for donor in donors) == ["Twin 1", "Twin 2"]
    assert donors[0].distance_km == donors[1].distance_km


def test_zero_coordinates_are_treated_as_missing():
    pipeline, _ = _pipeline([_donor("Zero", 0.0, 77.6), _donor("Partial", 13.0, None)])

    assert pipeline.run("560001", "O+") == []


def test_empty_candidate_set_returns_empty_list():
    store = RecordingStore()
    pipeline, _ = _pipeline([], store=store)

    assert pipeline.run("560001", "O+") == []
    assert store.operations == ["ensure", "clear", "insert", "read"]


def test_under_threshold_donors_never_ranked():
    pipeline, _ = _pipeline([_donor("Low", 13.0, 77.6, 4.8), _donor("High", 13.0, 77.6, 4.9)])

    assert [donor.name for donor in pipeline.run("560001", "O+")] == ["High"]


def test_previous_run_rows_are_cleared():
    store = RecordingStore()
    first, _ = _pipeline([_donor("Earlier", 13.0, 77.6)], store=store)
    second, _ = _pipeline([_donor("Later", 13.1, 77.7)], store=store)

    first.run("560001", "O+")
    donors = second.run("560001", "O+")

    assert [donor.name for donor in donors] == ["Later"]


def test_geocoding_failure_stops_before_any_repository_call():
    store = RecordingStore()
    resolver = DummyResolver(error=NotFoundError("no match", stage="geocoding"))
    pipeline, repository = _pipeline([_donor("Donor B", 13.0, 77.6)], resolver=resolver, store=store)

    with pytest.raises(NotFoundError):
        pipeline.run("000000", "O+")

    assert resolver.calls == ["000000"]
    assert repository.calls == []
    assert store.operations == []


def test_insert_failure_aborts_run():
    store = RecordingStore(fail_on_insert=True)
    pipeline, _ = _pipeline([_donor("Donor B", 13.0, 77.6)], store=store)

    with pytest.raises(RepositoryError):
        pipeline.run("560001", "O+")

    assert "read" not in store.operations


def test_distances_use_single_origin():
    seen = []

    def distance(a, b):
        seen.append(a)
        return 1.0

    repository = DummyRepository([_donor("One", 13.0, 77.6), _donor("Two", 13.1, 77.7)])
    pipeline = RankingPipeline(
        resolver=DummyResolver(BANGALORE),
        donor_filter=DonorFilter(repository, threshold=4.8),
        result_store=InMemoryResultStore(),
        distance=distance,
    )

    pipeline.run("560001", "O+")

    assert seen == [BANGALORE, BANGALORE]


def test_build_pipeline_falls_back_to_local_sources(monkeypatch, tmp_path):
    from donorfinder.data import donor_repository
    from donorfinder.persistence import results
    from donorfinder.services import ranking

    donor_file = tmp_path / "donors.csv"
    donor_file.write_text(
        "name_of_the_donor,donor_mobile_number,address,donor_blood_group,latitude,longitude,behavior_analysis\n"
        "Asha,9000000001,MG Road,O+,13.0,77.6,5.0\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(donor_repository, "get_supabase_client", lambda: None)
    monkeypatch.setattr(results, "get_supabase_client", lambda: None)
    monkeypatch.setattr(donor_repository.settings, "donor_file", donor_file)
    monkeypatch.setattr(ranking, "NominatimGeocoder", lambda: DummyResolver(BANGALORE))

    pipeline = ranking.build_pipeline()

    assert isinstance(pipeline.donor_filter.repository, donor_repository.CsvDonorRepository)
    assert isinstance(pipeline.result_store, results.InMemoryResultStore)
    assert [donor.name for donor in pipeline.run("560001", "O+")] == ["Asha"]
