import os
import re
from html import unescape
from urllib.parse import parse_qs, urlsplit

import cv2
import numpy as np

import doctree.decorator.markdown as markdown_module
from doctree.component import DocControl, flush
from doctree.decorator import MarkdownDecorator, jpeg_response
from doctree.events import NodeEvent, SignalEvent
from doctree.image import encode_jpeg, load_image
from doctree.tree import ContainerNode, DocTree, FileNode, TextNode, load_tree


class RecordingConverter:
    def __init__(self):
        self.calls = []

    def render(self, text, control=None, base_key=None):
        self.calls.append((text, control, base_key))
        return f"<p>{text}</p>"


def _make_docs(tmp_path, content="![diagram](images/diagram.png)\n"):
    docs = tmp_path / "docs"
    section = docs / "section"
    (section / "images").mkdir(parents=True)
    (section / "page.md").write_text(content, encoding="utf-8")
    cv2.imwrite(str(section / "images" / "diagram.png"), np.full((48, 32, 3), 90, dtype=np.uint8))
    cv2.imwrite(str(section / "images" / "other.png"), np.full((20, 20, 3), 30, dtype=np.uint8))
    return docs


def _request_image(docs, page="section/page", image_link="images/diagram.png", signal=MarkdownDecorator.SIGNAL_IMAGE):
    tree = load_tree(str(docs))
    params = {} if image_link is None else {"imageLink": image_link}
    control = DocControl(tree, page=page, params=params)
    MarkdownDecorator().listen(SignalEvent(signal=signal, control=control, doc_tree=tree))
    return control.presenter.response


def _decode(body):
    return cv2.imdecode(np.frombuffer(body, dtype=np.uint8), cv2.IMREAD_COLOR)


def _assert_error_image(response):
    http_response = flush(response)
    assert http_response.headers["Content-Type"] == "image/jpeg"
    assert _decode(http_response.body).shape == (100, 400, 3)


def test_container_node_is_untouched():
    converter = RecordingConverter()
    node = ContainerNode(key="section", title="Section")
    MarkdownDecorator(converter).listen(NodeEvent(node=node, control=None))
    assert converter.calls == []
    assert node.children == []


def test_text_leaf_is_rendered_in_place():
    converter = RecordingConverter()
    control = DocControl(DocTree())
    node = TextNode(key="page", content="*hello*")
    MarkdownDecorator(converter).listen(NodeEvent(node=node, control=control))
    assert node.content == "<p>*hello*</p>"
    assert converter.calls == [("*hello*", control, "page")]


def test_text_leaf_with_real_converter():
    node = TextNode(key="page", content="# Hello")
    MarkdownDecorator().listen(NodeEvent(node=node, control=DocControl(DocTree())))
    assert node.content.strip() == "<h1>Hello</h1>"


def test_unknown_signal_sends_nothing(tmp_path):
    docs = _make_docs(tmp_path)
    assert _request_image(docs, signal="somethingElse") is None


def test_happy_path_serves_referenced_image(tmp_path):
    docs = _make_docs(tmp_path)
    response = _request_image(docs)
    http_response = flush(response)
    assert http_response.headers["Content-Type"] == "image/jpeg"
    image_path = os.path.join(str(docs), "section", "images", "diagram.png")
    assert http_response.body == encode_jpeg(load_image(image_path), 94)
    assert _decode(http_response.body).shape == (48, 32, 3)


def test_link_missing_from_document_gives_error_image(tmp_path):
    # other.png exists next to the page but the page never references it
    docs = _make_docs(tmp_path)
    _assert_error_image(_request_image(docs, image_link="images/other.png"))


def test_traversal_outside_document_directory_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path, content="![x](../../../etc/passwd) ![y](../secret.png)\n")
    cv2.imwrite(str(docs / "secret.png"), np.zeros((10, 10, 3), dtype=np.uint8))
    _assert_error_image(_request_image(docs, image_link="../../../etc/passwd"))
    _assert_error_image(_request_image(docs, image_link="../secret.png"))


def test_sibling_directory_with_shared_prefix_is_rejected(tmp_path):
    docs = _make_docs(tmp_path, content="![x](../section2/img.png)\n")
    (docs / "section2").mkdir()
    cv2.imwrite(str(docs / "section2" / "img.png"), np.zeros((10, 10, 3), dtype=np.uint8))
    _assert_error_image(_request_image(docs, image_link="../section2/img.png"))


def test_symlink_escaping_document_directory_is_rejected(tmp_path):
    docs = _make_docs(tmp_path, content="![x](images/link.png)\n")
    outside = tmp_path / "outside.png"
    cv2.imwrite(str(outside), np.zeros((10, 10, 3), dtype=np.uint8))
    os.symlink(str(outside), str(docs / "section" / "images" / "link.png"))
    _assert_error_image(_request_image(docs, image_link="images/link.png"))


def test_corrupt_image_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path, content="![x](images/broken.png)\n")
    (docs / "section" / "images" / "broken.png").write_bytes(b"not really a png")
    _assert_error_image(_request_image(docs, image_link="images/broken.png"))


def test_missing_file_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path, content="![x](images/gone.png)\n")
    _assert_error_image(_request_image(docs, image_link="images/gone.png"))


def test_missing_node_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path)
    _assert_error_image(_request_image(docs, page="section/nope"))


def test_container_page_or_missing_link_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path)
    _assert_error_image(_request_image(docs, page="section"))
    _assert_error_image(_request_image(docs, image_link=None))
    _assert_error_image(_request_image(docs, image_link=""))


def test_text_leaf_page_gives_error_image():
    tree = DocTree()
    tree.add(TextNode(key="note", content="images/diagram.png"))
    control = DocControl(tree, page="note", params={"imageLink": "images/diagram.png"})
    MarkdownDecorator().listen(SignalEvent(signal="parsedown2image", control=control, doc_tree=tree))
    _assert_error_image(control.presenter.response)


def test_jpeg_is_encoded_only_when_response_is_sent(tmp_path, monkeypatch):
    calls = []
    real_encode = markdown_module.encode_jpeg

    def counting_encode(img, quality=94):
        calls.append(quality)
        return real_encode(img, quality)

    monkeypatch.setattr(markdown_module, "encode_jpeg", counting_encode)
    docs = _make_docs(tmp_path)
    response = _request_image(docs)
    assert calls == []
    flush(response)
    assert calls == [94]


def _request_node_image(node, image_link):
    tree = DocTree()
    tree.add(node)
    control = DocControl(tree, page=node.key, params={"imageLink": image_link})
    MarkdownDecorator().listen(SignalEvent(signal=MarkdownDecorator.SIGNAL_IMAGE, control=control, doc_tree=tree))
    return control.presenter.response


def test_bare_filename_is_confined_to_working_directory(tmp_path, monkeypatch):
    secret = tmp_path / "secret"
    secret.mkdir()
    cv2.imwrite(str(secret / "x.png"), np.zeros((7, 9, 3), dtype=np.uint8))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    # absolute path without its leading slash, so "" + "/" + link would hit it
    link = str(secret / "x.png").lstrip("/")
    node = FileNode(key="page", filename="page.md", content=f"![x]({link})")
    _assert_error_image(_request_node_image(node, link))


def test_relative_filename_serves_image_next_to_it(tmp_path, monkeypatch):
    _make_docs(tmp_path)
    monkeypatch.chdir(tmp_path)
    node = FileNode(key="page", filename="docs/section/page.md", content="![diagram](images/diagram.png)")
    http_response = flush(_request_node_image(node, "images/diagram.png"))
    assert _decode(http_response.body).shape == (48, 32, 3)


def test_percent_encoded_link_resolves_decoded_file(tmp_path):
    docs = _make_docs(tmp_path, content="![p](images/my%20pic.png)\n")
    cv2.imwrite(str(docs / "section" / "images" / "my pic.png"), np.full((15, 25, 3), 60, dtype=np.uint8))
    http_response = flush(_request_image(docs, image_link="images/my%20pic.png"))
    assert _decode(http_response.body).shape == (15, 25, 3)


def test_rendered_image_link_is_served(tmp_path):
    # angle-bracket source: markdown-it percent-encodes the space in src
    docs = _make_docs(tmp_path, content="![p](<images/my pic.png>)\n")
    cv2.imwrite(str(docs / "section" / "images" / "my pic.png"), np.full((15, 25, 3), 60, dtype=np.uint8))
    tree = load_tree(str(docs))
    control = DocControl(tree, page="section/page", listeners=[MarkdownDecorator()])
    html = control.render()
    match = re.search(r'src="([^"]*)"', html)
    query = parse_qs(urlsplit(unescape(match.group(1))).query)
    assert query["page"] == ["section/page"]
    http_response = flush(_request_image(docs, image_link=query["imageLink"][0]))
    assert _decode(http_response.body).shape == (15, 25, 3)


def test_image_too_large_for_jpeg_gives_error_image(tmp_path):
    docs = _make_docs(tmp_path, content="![w](images/wide.png)\n")
    cv2.imwrite(str(docs / "section" / "images" / "wide.png"), np.zeros((2, 70000, 3), dtype=np.uint8))
    _assert_error_image(_request_image(docs, image_link="images/wide.png"))


def test_encode_failure_at_send_time_writes_error_image():
    response = jpeg_response(np.zeros((2, 70000, 3), dtype=np.uint8))
    _assert_error_image(response)
