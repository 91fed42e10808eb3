"""Tests for the containers collection and log streams."""

import io

import pytest

from dockmux.api.containers import Container, ContainerCollection, LogStream
from dockmux.api.exceptions import ContainerNotFound, NotFound
from dockmux.api.frames import Frame, Stream

from streams import ChunkedSource, frame_bytes


@pytest.fixture()
def containers(fake_client):
    return ContainerCollection(fake_client)


def test_container_from_list_entry(containers):
    container = Container({
        'Id': '0123456789abcdef',
        'Names': ['/web'],
        'State': 'running',
        'Image': 'nginx:latest',
        'Labels': {'app': 'web'},
    }, containers)
    assert container.short_id == '0123456789ab'
    assert container.name == 'web'
    assert container.status == 'running'
    assert container.labels == {'app': 'web'}
    assert repr(container) == '<Container: web>'


def test_container_from_inspect(containers):
    container = Container({
        'Id': 'abc',
        'Name': '/db',
        'State': {'Status': 'exited'},
        'Config': {'Tty': True, 'Labels': None},
    }, containers)
    assert container.name == 'db'
    assert container.status == 'exited'
    assert container.tty is True
    assert container.labels == {}


def test_list_params(containers, fake_client):
    fake_client.http.get.return_value = [{'Id': 'a', 'Names': ['/a'], 'State': 'running'}]
    result = containers.list(all=True, filters={'status': ['running']})

    fake_client.http.get.assert_called_once_with(
        '/containers/json',
        params={'all': True, 'limit': None, 'size': None, 'filters': {'status': ['running']}}
    )
    assert [c.name for c in result] == ['a']


def test_inspect_not_found(containers, fake_client):
    fake_client.http.get.side_effect = NotFound('no such container', status_code=404)
    with pytest.raises(ContainerNotFound) as exc_info:
        containers.inspect('ghost')
    assert exc_info.value.status_code == 404


def test_create_requires_image(containers):
    with pytest.raises(ValueError):
        containers.create('')


def test_create_builds_config(containers, fake_client):
    fake_client.http.post.return_value = {'Id': 'new', 'Warnings': []}
    fake_client.http.get.return_value = {'Id': 'new', 'Name': '/app'}

    container = containers.create(
        'alpine',
        name='app',
        command='echo hi',
        environment={'A': '1'},
        ports={80: 8080},
        tty=True,
    )

    path = fake_client.http.post.call_args[0][0]
    kwargs = fake_client.http.post.call_args[1]
    assert path == '/containers/create'
    assert kwargs['params'] == {'name': 'app', 'platform': None}
    config = kwargs['data']
    assert config['Cmd'] == ['sh', '-c', 'echo hi']
    assert config['Env'] == ['A=1']
    assert config['Tty'] is True
    assert config['ExposedPorts'] == {'80/tcp': {}}
    assert config['HostConfig']['PortBindings'] == {'80/tcp': [{'HostPort': '8080'}]}
    assert container.name == 'app'


def test_rename_and_wait(containers, fake_client):
    containers.rename('web', 'web-old')
    fake_client.http.post.assert_called_with(
        '/containers/web/rename', params={'name': 'web-old'}, errors={404: ContainerNotFound}
    )

    fake_client.http.post.return_value = {'StatusCode': 0}
    assert containers.wait('web', condition='not-running') == {'StatusCode': 0}
    assert fake_client.http.post.call_args[1]['params'] == {'condition': 'not-running'}
    assert fake_client.http.post.call_args[1]['timeout'] is None


def test_prune_filters(containers, fake_client):
    containers.prune({'until': ['24h']})
    fake_client.http.post.assert_called_once_with('/containers/prune', params={'filters': {'until': ['24h']}})


def test_logs_stream_returns_frames(containers, fake_client):
    body = io.BytesIO(frame_bytes(1, b'started\n') + frame_bytes(2, b'warning\n'))
    fake_client.http.get.return_value = body

    logs = containers.logs('web', stream=True, tail='10')

    assert isinstance(logs, LogStream)
    assert list(logs) == [Frame('started', 8, Stream.STDOUT), Frame('warning', 8, Stream.STDERR)]
    assert body.closed
    args, kwargs = fake_client.http.get.call_args
    assert args == ('/containers/web/logs',)
    assert kwargs['params']['tail'] == '10'
    assert kwargs['params']['follow'] is False
    assert kwargs['stream'] is True
    assert 'timeout' not in kwargs


def test_logs_text(containers, fake_client):
    fake_client.http.get.return_value = io.BytesIO(b'tty line 1\ntty line 2\n')
    assert containers.logs('web') == 'tty line 1\ntty line 2'


def test_logs_follow_disables_timeout(containers, fake_client):
    fake_client.http.get.return_value = io.BytesIO(b'')
    containers.logs('web', stream=True, follow=True)
    assert fake_client.http.get.call_args[1]['timeout'] is None


def test_logs_only_stdout_attributes_raw_output(containers, fake_client):
    fake_client.http.get.return_value = io.BytesIO(b'plain\n')
    frames = list(containers.logs('web', stream=True, stderr=False))
    assert frames == [Frame('plain', 6, Stream.STDOUT)]
    assert fake_client.http.get.call_args[1]['params']['stderr'] is False


def test_container_logs_uses_tty_flag(containers, fake_client):
    container = Container({'Id': 'abc', 'Config': {'Tty': True}}, containers)
    fake_client.http.get.return_value = io.BytesIO(b'\x01 looks like a header but is text\n')

    frames = list(container.logs(stream=True))

    assert frames[0].text == '\x01 looks like a header but is text'
    assert frames[0].stream is Stream.UNKNOWN


def test_attach_params(containers, fake_client):
    fake_client.http.post.return_value = io.BytesIO(frame_bytes(1, b'hi\n'))

    with containers.attach('web', logs=True, detach_keys='ctrl-p') as frames:
        assert [f.text for f in frames] == ['hi']

    args, kwargs = fake_client.http.post.call_args
    assert args == ('/containers/web/attach',)
    assert kwargs['params'] == {
        'stream': True, 'stdout': True, 'stderr': True, 'stdin': False,
        'logs': True, 'detachKeys': 'ctrl-p',
    }
    assert kwargs['timeout'] is None


def test_log_stream_close_on_early_exit():
    source = ChunkedSource(frame_bytes(1, b'a\n'), frame_bytes(1, b'b\n'))
    with LogStream(source) as logs:
        for frame in logs:
            assert frame.text == 'a'
            break
    assert source.closed
    assert source.chunks  # second frame never read
