"""
Tests for asset definition loading and kind resolution
"""

import pytest

from kapeta_registry.api.exceptions import ValidationError
from kapeta_registry.core import AssetLoader

from conftest import block, write_assets


class TestLoad:

    def test_loads_every_document(self, tmp_path):
        path = write_assets(tmp_path, block('acme/a'), block('acme/b'))

        assets = AssetLoader().load(path)

        assert [a.name for a in assets] == ['acme/a', 'acme/b']
        assert assets[0].kind == 'core/block-type'
        assert assets[0].handle == 'acme'

    def test_unknown_keys_survive(self, tmp_path):
        document = block('acme/a')
        document['custom'] = {'x': 1}
        path = write_assets(tmp_path, document)

        asset = AssetLoader().load(path)[0]

        assert asset.to_dict()['custom'] == {'x': 1}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="was not found"):
            AssetLoader().load(tmp_path / 'kapeta.yml')

    def test_directory_instead_of_file(self, tmp_path):
        with pytest.raises(ValidationError, match="is not a file"):
            AssetLoader().load(tmp_path)

    def test_missing_metadata(self, tmp_path):
        path = write_assets(tmp_path, {'kind': 'core/block-type'})

        with pytest.raises(ValidationError, match="missing metadata"):
            AssetLoader().load(path)

    def test_missing_name_in_any_document(self, tmp_path):
        path = write_assets(tmp_path, block('acme/a'), {'kind': 'core/block-type', 'metadata': {}})

        with pytest.raises(ValidationError, match="metadata.name"):
            AssetLoader().load(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'kapeta.yml'
        path.write_text('')

        with pytest.raises(ValidationError, match="does not contain"):
            AssetLoader().load(path)

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / 'kapeta.yml'
        path.write_text('kind: [unclosed')

        with pytest.raises(ValidationError, match="could not be parsed"):
            AssetLoader().load(path)


class TestResolveBaseKind:

    @pytest.mark.asyncio
    async def test_core_kind_is_returned_as_is(self, registry):
        loader = AssetLoader(registry)

        assert await loader.resolve_base_kind('core/block-type') == 'core/block-type'
        assert registry.events == []

    @pytest.mark.asyncio
    async def test_custom_kind_resolves_through_registry(self, registry, published_version):
        registry.versions['kapeta/block-type-service:1.0.0'] = published_version(
            'kapeta/block-type-service', '1.0.0'
        )

        kind = await AssetLoader(registry).resolve_base_kind('kapeta/block-type-service:1.0.0')

        assert kind == 'core/block-type'

    @pytest.mark.asyncio
    async def test_custom_kind_without_version(self, registry):
        with pytest.raises(ValidationError, match="Invalid asset kind"):
            await AssetLoader(registry).resolve_base_kind('kapeta/block-type-service')

    @pytest.mark.asyncio
    async def test_unknown_custom_kind(self, registry):
        with pytest.raises(ValidationError, match="was not found"):
            await AssetLoader(registry).resolve_base_kind('kapeta/unknown:1.0.0')


class TestFindAssetsInPath:

    def test_indexes_nested_definitions(self, tmp_path):
        write_assets(tmp_path, block('acme/root'))
        write_assets(tmp_path / 'services' / 'users', block('acme/users'))
        write_assets(tmp_path / 'orders', block('acme/orders'), block('acme/order-events'))

        found = AssetLoader().find_assets_in_path(tmp_path)

        assert found == {
            'acme/users': tmp_path / 'services' / 'users',
            'acme/orders': tmp_path / 'orders',
            'acme/order-events': tmp_path / 'orders',
        }

    def test_skips_unreadable_files(self, tmp_path):
        broken = tmp_path / 'broken'
        broken.mkdir()
        (broken / 'kapeta.yml').write_text('kind: [unclosed')
        write_assets(tmp_path / 'ok', block('acme/ok'))

        assert AssetLoader().find_assets_in_path(tmp_path) == {'acme/ok': tmp_path / 'ok'}

    def test_skips_files_that_are_not_utf8(self, tmp_path):
        legacy = tmp_path / 'legacy'
        legacy.mkdir()
        (legacy / 'kapeta.yml').write_bytes(b'kind: core/block\nmetadata:\n  name: acme/caf\xe9\n')
        write_assets(tmp_path / 'ok', block('acme/ok'))

        assert AssetLoader().find_assets_in_path(tmp_path) == {'acme/ok': tmp_path / 'ok'}
