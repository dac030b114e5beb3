import threading

from mediadownloader.toolspath import ToolsPath


def test_defaults_are_empty():
    tools = ToolsPath()
    assert (tools.yt_dlp_path, tools.ffmpeg_path, tools.node_js_path) == ("", "", "")


def test_set_all_copies_every_path():
    target = ToolsPath()
    source = ToolsPath("/usr/bin/yt-dlp", "/usr/bin/ffmpeg", "/usr/bin/node")
    target.set_all(source)
    assert target == source
    assert target.node_js_path == "/usr/bin/node"


def test_set_all_with_self_keeps_values():
    tools = ToolsPath("a", "b", "c")
    tools.set_all(tools)
    assert tools == ToolsPath("a", "b", "c")


def test_snapshot_is_independent():
    tools = ToolsPath("a", "b", "c")
    copy = tools.snapshot()
    tools.ffmpeg_path = "changed"
    assert copy.ffmpeg_path == "b"
    assert copy != tools


def test_equality_ignores_lock():
    assert ToolsPath("a", "b", "c") == ToolsPath("a", "b", "c")
    assert ToolsPath("a", "b", "c") != ToolsPath("a", "b", "d")


def test_concurrent_set_all_stays_consistent():
    target = ToolsPath()
    sources = [ToolsPath(f"y{i}", f"f{i}", f"n{i}") for i in range(20)]
    threads = [threading.Thread(target=target.set_all, args=(s,)) for s in sources]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    snap = target.snapshot()
    assert snap in sources