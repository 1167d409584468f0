"""
Integration tests for collecting a dataset from a real zip archive.

Archives and images are generated with Pillow inside tmp_path.
"""

import asyncio

import pytest

from zipclass import CollectOptions, collect_dataset
from zipclass.errors import ConfigurationError, DecodeError, EmptyDatasetError


def run(coro):
    return asyncio.run(coro)


def _collect(zip_path, data_dir, **kwargs):
    options = CollectOptions(url=f"file://{zip_path}", data_dir=str(data_dir), **kwargs)
    return run(collect_dataset(options))


class TestPetsArchive:
    """train/cat/a.jpg, train/dog/b.jpg, test/cat/c.jpg"""

    def test_meta(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        assert source.get_meta().to_dict() == {
            "type": "image",
            "size": {"train": 2, "test": 2},
            "dimension": {"x": 8, "y": 6, "z": 3},
            "labelMap": ["cat", "dog"],
        }

    def test_partition(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        train = [(e.path.split("/")[-1], e.label) for e in source.partition.train]
        test = [(e.path.split("/")[-1], e.label) for e in source.partition.test]

        assert train == [("a.jpg", 0), ("b.jpg", 1)]
        assert test == [("c.jpg", 0)]

    def test_first_train_sample(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        sample = run(source.train.next())

        assert sample.label == 0
        assert (sample.data.width, sample.data.height) == (8, 6)
        assert sample.data.shape == (6, 8, 3)

    def test_test_split_runs_out(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        async def read_three():
            return [await source.test.next() for _ in range(3)]

        first, second, third = run(read_three())

        assert first.label == 0
        assert second is None
        assert third is None

    def test_batches(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        train_batch = run(source.train.next_batch(3))
        test_batch = run(source.test.next_batch(3))

        assert [s.label if s else None for s in train_batch] == [0, 1, None]
        assert [s.label for s in test_batch] == [0]

    def test_strict_meta(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work", metadata_validation="strict")

        assert source.get_meta().size.test == 1

    def test_local_archive_is_removed(self, pets_zip, tmp_path):
        _collect(pets_zip, tmp_path / "work")

        assert not pets_zip.exists()

    def test_local_archive_kept_on_request(self, pets_zip, tmp_path):
        _collect(pets_zip, tmp_path / "work", keep_local_archive=True)

        assert pets_zip.exists()

    def test_images_extracted_under_data_dir(self, pets_zip, tmp_path):
        source = _collect(pets_zip, tmp_path / "work")

        for entry in source.partition.train + source.partition.test:
            assert entry.path.startswith(str(tmp_path / "work" / "images"))


class TestArchiveVariants:

    def test_nested_root_and_validation(self, make_zip, tmp_path):
        archive = make_zip(
            {
                "flowers/train/rose/1.png": None,
                "flowers/train/tulip/2.png": None,
                "flowers/validation/daisy/3.png": None,
                "flowers/test/tulip/4.png": None,
            }
        )

        source = _collect(archive, tmp_path / "work", metadata_validation="strict")
        meta = source.get_meta()

        assert meta.size.train == 2
        assert meta.size.test == 1
        assert set(meta.label_map) == {"rose", "tulip", "daisy"}

    def test_grayscale_strict_channels(self, make_zip, tmp_path):
        archive = make_zip({"train/digit/0.png": ((28, 28), "L")})

        fast = _collect(archive, tmp_path / "fast", keep_local_archive=True)
        strict = _collect(archive, tmp_path / "strict", metadata_validation="strict")

        assert fast.get_meta().dimension.z == 3
        assert strict.get_meta().dimension.z == 1

    def test_meta_uses_first_image_only(self, make_zip, tmp_path):
        archive = make_zip(
            {"train/a/1.png": ((4, 4), "RGB"), "train/a/2.png": ((16, 9), "RGB")}
        )

        meta = _collect(archive, tmp_path / "work").get_meta()

        assert (meta.dimension.x, meta.dimension.y) == (4, 4)

    def test_empty_train(self, make_zip, tmp_path, fake_decoder):
        archive = make_zip({"test/cat/a.jpg": None})
        decoder = fake_decoder()

        with pytest.raises(EmptyDatasetError):
            _collect(archive, tmp_path / "work", decoder=decoder)

        assert decoder.calls == []

    def test_corrupt_image_fails_batch(self, make_zip, tmp_path):
        archive = make_zip(
            {
                "train/cat/a.jpg": None,
                "train/cat/b.jpg": b"not an image",
                "train/cat/c.jpg": None,
            }
        )
        source = _collect(archive, tmp_path / "work")

        with pytest.raises(DecodeError, match="b.jpg"):
            run(source.train.next_batch(3))

        source.train.seek(2)
        assert run(source.train.next()).label == 0

    def test_injected_decoder(self, pets_zip, tmp_path, fake_decoder):
        decoder = fake_decoder(width=99, height=77)

        source = _collect(pets_zip, tmp_path / "work", decoder=decoder)
        sample = run(source.train.next())

        assert source.get_meta().dimension.x == 99
        assert sample.data.width == 99
        assert len(decoder.calls) == 2

    def test_shuffled_labels_are_reproducible(self, make_zip, tmp_path):
        archive = make_zip({f"train/c{i}/{i}.png": None for i in range(8)})

        first = _collect(
            archive, tmp_path / "one", shuffle_before_indexing=True, seed=5, keep_local_archive=True
        )
        second = _collect(archive, tmp_path / "two", shuffle_before_indexing=True, seed=5)

        assert first.get_meta().label_map == second.get_meta().label_map

    def test_recollect_replaces_previous_dataset(self, make_zip, tmp_path):
        first = make_zip({"train/cat/a.jpg": None}, name="first.zip")
        second = make_zip({"train/dog/b.jpg": None}, name="second.zip")

        _collect(first, tmp_path / "work")
        source = _collect(second, tmp_path / "work")

        assert source.get_meta().label_map == ["dog"]


class TestConfigurationErrors:

    def test_no_io_before_validation(self, tmp_path):
        data_dir = tmp_path / "never"

        with pytest.raises(ConfigurationError):
            run(collect_dataset(CollectOptions(url="file:///x.tar", data_dir=str(data_dir))))

        assert not data_dir.exists()

    def test_missing_url(self, tmp_path):
        with pytest.raises(ConfigurationError):
            run(collect_dataset(CollectOptions(data_dir=str(tmp_path))))

    def test_short_hf_url_fails_before_io(self, tmp_path):
        data_dir = tmp_path / "never"

        with pytest.raises(ConfigurationError):
            run(collect_dataset(CollectOptions(url="hf://org/pets.zip", data_dir=str(data_dir))))

        assert not data_dir.exists()
