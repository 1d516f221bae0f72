import json
from typing import cast
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch
from freezegun import freeze_time

from dropshare.types import LambdaEvent, LambdaContext, LambdaConfiguration
from dropshare.constants import ENV
from dropshare.models import ShareRecordModel, SharedFileModel
from dropshare.lambdas.share import app
from dropshare.dao.base import ShareRecordBaseDAO
from dropshare.dao.exceptions import DataStoreError
from dropshare.exceptions import MissingEnvironmentVariableError


CREATED_AT = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def make_event(share_id: str | None, accept: str = 'text/html') -> LambdaEvent:
    return cast(
        LambdaEvent,
        {
            'resource': '/share/{id}',
            'path': f'/share/{share_id}',
            'httpMethod': 'GET',
            'headers': {'Accept': accept, 'User-Agent': 'pytest'},
            'pathParameters': None if share_id is None else {'id': share_id},
            'requestContext': {'resourcePath': '/share/{id}', 'httpMethod': 'GET', 'domainName': 'share.example.com', 'stage': 'test'},
        },
    )


class TestShareHandler:
    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'share'})

    @pytest.fixture
    def config(self) -> LambdaConfiguration:
        return cast(LambdaConfiguration, {'redis': {'host': 'redis.test', 'port': 6379, 'db': 0}})

    @pytest.fixture
    def record(self) -> ShareRecordModel:
        return ShareRecordModel(
            share_id='V1StGXR8_Z',
            files=(
                SharedFileModel(url='https://store.example/abc', filename='report.pdf'),
                SharedFileModel(url='https://store.example/def?sig=1', filename='<script>alert(1)</script>.txt'),
            ),
            created_at=CREATED_AT,
            expires_at=CREATED_AT + timedelta(minutes=10),
        )

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        context: LambdaContext,
        config: LambdaConfiguration,
        share_dao: ShareRecordBaseDAO,
        record: ShareRecordModel,
    ) -> None:
        monkeypatch.delenv(ENV.App.APP_ENV, raising=False)
        monkeypatch.delenv(ENV.App.AWS_SAM_LOCAL, raising=False)

        share_dao.put(record, ttl_seconds=600)
        self.share_dao_factory = MagicMock(return_value=share_dao)
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: self.config)
        monkeypatch.setattr(app, 'app_prefix', lambda: 'dropshare:test')
        monkeypatch.setattr(app, 'ShareRecordRedisDAO', self.share_dao_factory)

        self.context = context
        self.config = config
        self.share_dao = share_dao

    @freeze_time('2026-10-19 12:00:30')
    def test_lambda_handler_renders_share_page(self) -> None:
        response = app.lambda_handler(make_event('V1StGXR8_Z'), self.context)
        html = response['body']

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'] == 'text/html; charset=utf-8'
        assert response['headers']['Cache-Control'] == 'no-store'
        assert 'These files will expire in 9 minutes' in html
        assert 'report.pdf' in html
        assert 'href="https://store.example/abc?download=report.pdf"' in html
        assert html.index('report.pdf') < html.index('alert(1)')

    @freeze_time('2026-10-19 12:00:30')
    def test_lambda_handler_escapes_filenames(self) -> None:
        html = app.lambda_handler(make_event('V1StGXR8_Z'), self.context)['body']

        assert '<script>' not in html
        assert '&lt;script&gt;alert(1)&lt;/script&gt;.txt' in html
        assert 'https://store.example/def?sig=1&amp;download=%3Cscript%3Ealert%281%29%3C%2Fscript%3E.txt' in html

    @freeze_time('2026-10-19 12:00:30')
    def test_lambda_handler_never_links_script_urls(self) -> None:
        self.share_dao.put(
            ShareRecordModel(
                share_id='scriptUrl0',
                files=(
                    SharedFileModel(url='javascript:alert(document.domain)//', filename='x.pdf'),
                    SharedFileModel(url='data:text/html;base64,PHNjcmlwdD4=', filename='y.pdf'),
                    SharedFileModel(url='https://store.example/ok', filename='ok.pdf'),
                ),
                created_at=CREATED_AT,
                expires_at=CREATED_AT + timedelta(minutes=10),
            ),
            ttl_seconds=600,
        )

        html = app.lambda_handler(make_event('scriptUrl0'), self.context)['body']

        assert 'javascript:' not in html
        assert 'data:' not in html
        assert html.count('href=') == 1
        assert 'href="https://store.example/ok?download=ok.pdf"' in html
        assert '<span class="filename">x.pdf</span> <span class="unavailable">Unavailable</span>' in html

    @freeze_time('2026-10-19 12:09:00')
    def test_lambda_handler_with_one_minute_left(self) -> None:
        html = app.lambda_handler(make_event('V1StGXR8_Z'), self.context)['body']
        assert 'These files will expire in 1 minute<' in html

    @freeze_time('2026-10-19 12:00:30')
    def test_lambda_handler_renders_json(self) -> None:
        response = app.lambda_handler(make_event('V1StGXR8_Z', accept='application/json'), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'] == 'application/json'
        assert body == {
            'files': [
                {'url': 'https://store.example/abc', 'filename': 'report.pdf'},
                {'url': 'https://store.example/def?sig=1', 'filename': '<script>alert(1)</script>.txt'},
            ],
            'minutesRemaining': 9,
            'expiresAt': '2026-10-19T12:10:00.000Z',
        }

    def test_lambda_handler_builds_dao_from_config(self) -> None:
        with freeze_time('2026-10-19 12:00:30'):
            app.lambda_handler(make_event('V1StGXR8_Z'), self.context)

        self.share_dao_factory.assert_called_once_with(redis_host='redis.test', redis_port=6379, redis_db=0, prefix='dropshare:test')

    @pytest.mark.parametrize('accept, content_type', [('text/html', 'text/html; charset=utf-8'), ('application/json', 'application/json')])
    def test_lambda_handler_with_unknown_share(self, accept: str, content_type: str) -> None:
        response = app.lambda_handler(make_event('missing000', accept=accept), self.context)

        assert response['statusCode'] == 404
        assert response['headers']['Content-Type'] == content_type
        if accept == 'application/json':
            assert json.loads(response['body']) == {'message': 'Share not found', 'code': 'SHARE_NOT_FOUND'}

    @freeze_time('2026-10-19 12:10:00')
    def test_lambda_handler_with_expired_share(self) -> None:
        response = app.lambda_handler(make_event('V1StGXR8_Z', accept='application/json'), self.context)

        assert response['statusCode'] == 404
        assert self.share_dao.deleted == ['V1StGXR8_Z']

    def test_lambda_handler_without_share_id(self) -> None:
        response = app.lambda_handler(make_event(None), self.context)

        assert response['statusCode'] == 404
        self.share_dao_factory.assert_not_called()

    def test_lambda_handler_with_data_store_error(self) -> None:
        failing_dao = MagicMock(spec=ShareRecordBaseDAO)
        failing_dao.get.side_effect = DataStoreError("Stored share record 'V1StGXR8_Z' is malformed.")
        self.share_dao_factory.return_value = failing_dao

        response = app.lambda_handler(make_event('V1StGXR8_Z'), self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body']) == {'message': 'Internal server error'}

    def test_lambda_handler_with_missing_appconfig_environment(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setattr(app, 'load_config', MagicMock(side_effect=MissingEnvironmentVariableError('APPCONFIG_APP_ID')))

        response = app.lambda_handler(make_event('V1StGXR8_Z'), self.context)

        assert response['statusCode'] == 500
