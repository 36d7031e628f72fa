"""Isolated JavaScript execution context for one render batch."""

from __future__ import annotations

import json
import logging
from typing import Dict, List

import dukpy

from .document import DocumentEmulator
from .dom_model import SyntheticNode
from .errors import ExecutionFailure, UnresolvedReference

logger = logging.getLogger(__name__)


PRELUDE_JS = """
var __noop = function () {};

function __Node(id) {
  this.__id = id;
}
__Node.prototype.appendChild = function (child) {
  call_python('dom.append_child', this.__id, child.__id);
  return child;
};
__Node.prototype.insertBefore = function (node, reference) {
  call_python('dom.insert_before', this.__id, node.__id, reference ? reference.__id : null);
  return node;
};
__Node.prototype.setAttribute = function (name, value) {
  var stored = value === null || value === undefined ? null : String(value);
  call_python('dom.set_attribute', this.__id, String(name), stored);
};
__Node.prototype.addEventListener = __noop;

function __Comment(id) {
  this.__id = id;
}

var __wrappers = {};
function __wrap(id, Wrapper) {
  if (id === null || id === undefined) {
    return null;
  }
  if (!__wrappers.hasOwnProperty(id)) {
    __wrappers[id] = new (Wrapper || __Node)(id);
  }
  return __wrappers[id];
}

var __parentNode = {
  get: function () {
    return __wrap(call_python('dom.parent', this.__id));
  }
};
Object.defineProperty(__Node.prototype, 'parentNode', __parentNode);
Object.defineProperty(__Comment.prototype, 'parentNode', __parentNode);

var document = {
  head: {
    module: null,
    appendChild: function (style) {
      var text = typeof style.textContent === 'string' ? style.textContent : null;
      call_python('dom.head_append', this.module, style.__id, text);
      return style;
    }
  },
  querySelector: function () {
    return __wrap(call_python('dom.query_selector'));
  },
  createElement: function (tag) {
    return __wrap(call_python('dom.create_element', String(tag)));
  },
  createTextNode: function (text) {
    return __wrap(call_python('dom.create_text_node', String(text)));
  },
  createComment: function (text) {
    return __wrap(call_python('dom.create_comment', String(text)), __Comment);
  },
  createDocumentFragment: function () {
    return __wrap(call_python('dom.create_document_fragment'));
  }
};

var console = { log: __noop };
var log = function () {
  call_python('sandbox.log', Array.prototype.join.call(arguments, ' '));
};
var exports = {};
var module = { exports: exports };
var __targets = {};

function __mount(name, key, data) {
  var factory = module.exports[name];
  if (typeof factory !== 'function') {
    call_python('sandbox.unresolved', name);
    throw new ReferenceError('component "' + name + '" is not exported by the bundle');
  }
  document.head.module = key;
  return new factory({ target: __targets[key], data: data });
}
"""


class RenderContext:
    """Fresh interpreter plus document emulator, used for exactly one run.

    Targets must be registered before :meth:`run`; each becomes a global
    binding the instantiation program mounts a component into.
    """

    def __init__(self, filename: str) -> None:
        self.filename = filename
        self.document = DocumentEmulator()
        self._targets: Dict[str, int] = {}
        self._unresolved: List[str] = []
        self._used = False
        self._interpreter = dukpy.JSInterpreter()
        self._export_document()

    def _export_document(self) -> None:
        doc = self.document
        exports = {
            "dom.create_element": doc.create_element,
            "dom.create_text_node": doc.create_text_node,
            "dom.create_comment": doc.create_comment,
            "dom.create_document_fragment": doc.create_document_fragment,
            "dom.append_child": doc.append_child,
            "dom.insert_before": doc.insert_before,
            "dom.set_attribute": doc.set_attribute,
            "dom.query_selector": doc.query_selector,
            "dom.parent": doc.parent_of,
            "dom.head_append": doc.head_append,
            "sandbox.log": self._log,
            "sandbox.unresolved": self._unresolved.append,
        }
        for name, func in exports.items():
            self._interpreter.export_function(name, func)

    def _log(self, message: str) -> None:
        logger.info("[%s] %s", self.filename, message)

    def register_target(self, key: str) -> SyntheticNode:
        if key in self._targets:
            raise ValueError(f"target {key!r} is already registered")
        handle = self.document.create_target()
        self._targets[key] = handle
        return self.document.node(handle)

    def target(self, key: str) -> SyntheticNode:
        return self.document.node(self._targets[key])

    def style(self, key: str) -> str | None:
        return self.document.styles.get(key) or None

    def _target_bindings(self) -> str:
        lines = [f"__targets[{_js_string(key)}] = __wrap({handle});" for key, handle in self._targets.items()]
        return "\n".join(lines)

    def run(self, bundle_source: str, program: str) -> None:
        """Evaluate the bundle and the instantiation program in one pass."""
        if self._used:
            raise RuntimeError("a render context can only run once")
        self._used = True

        code = [PRELUDE_JS, self._target_bindings(), bundle_source, program, "null"]
        try:
            self._interpreter.evaljs(code)
        except dukpy.JSRuntimeError as exc:
            if self._unresolved:
                raise UnresolvedReference(self.filename, self._unresolved[-1], exc) from exc
            raise ExecutionFailure(self.filename, exc) from exc


def _js_string(value: str) -> str:
    # JSON string literals are valid JavaScript string literals.
    return json.dumps(value)


__all__ = ["PRELUDE_JS", "RenderContext"]
