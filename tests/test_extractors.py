"""Tests for code_guardian/extractors/"""

import textwrap
import time

import pytest

from code_guardian.extractors import MissingContentError, extract, get_extractor
from code_guardian.extractors.base import (
    count_lines_of_code,
    heuristic_complexity,
    match_delimiter,
    split_parameters,
)
from code_guardian.extractors.generic import GenericExtractor
from code_guardian.models import (
    CommentKind,
    DeclarationKind,
    FunctionKind,
    ImportKind,
    Language,
    SourceFile,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse(path: str, source: str):
    return extract(SourceFile(path, textwrap.dedent(source)))


def by_name(items):
    return {item.name: item for item in items}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def test_count_lines_of_code_skips_blank_and_comment_lines():
    content = "a = 1\n\n   // note\n# note\n/* block */\nb = 2\n"
    assert count_lines_of_code(content) == 2


def test_heuristic_complexity_counts_branches_and_operators():
    code = "if (a && b) { for (x of y) {} } else { while (c || d) {} }"
    # if, for, else, while + && and ||
    assert heuristic_complexity(code) == 1 + 4 + 2


def test_heuristic_complexity_whole_words_only():
    assert heuristic_complexity("notify(); format(); android();") == 1


def test_match_delimiter_skips_strings_and_comments():
    content = 'f() { s = "}"; // }\n /* } */ t = \'}\'; }'
    close = match_delimiter(content, content.index("{"))
    assert close == len(content) - 1


def test_match_delimiter_unbalanced_returns_none():
    assert match_delimiter("{ { }", 0) is None


def test_split_parameters_respects_nesting():
    assert split_parameters("a: Map<K, V>, b = [1, 2], c") == ["a: Map<K, V>", "b = [1, 2]", "c"]


def test_missing_content_raises():
    with pytest.raises(MissingContentError, match="src/a.ts"):
        extract(SourceFile("src/a.ts", None))


def test_unknown_language_uses_generic_extractor():
    assert isinstance(get_extractor(Language.UNKNOWN), GenericExtractor)
    parsed = parse("notes.txt", "// just a note\nplain text\n")
    assert parsed.language is Language.UNKNOWN
    assert parsed.functions == ()
    assert len(parsed.comments) == 1


# ---------------------------------------------------------------------------
# JavaScript / TypeScript
# ---------------------------------------------------------------------------

TS_SOURCE = """\
    import React from "react";
    import { useState, useEffect as effect } from "react";
    import * as path from "path";
    import "./styles.css";
    const fs = require("fs");
    import { helper } from "./utils";

    export function add(a, b) {
      return a + b;
    }

    const double = (x) => x * 2;

    async function load(url) {
      if (url && ok) {
        await fetch(url);
      }
    }

    export class Greeter extends Base {
      name = "x";
      count: number;
      constructor(name) {
        this.name = name;
      }
      greet() {
        return "hi " + this.name;
      }
      handle = (e) => {
        console.log(e);
      };
    }
    var legacy = 1;
    let counter = 0;
    """


def test_ts_functions():
    parsed = parse("src/app.ts", TS_SOURCE)
    assert parsed.language is Language.TYPESCRIPT
    funcs = by_name(parsed.functions)
    assert set(funcs) == {"add", "double", "load", "constructor", "greet", "handle"}

    assert funcs["add"].kind is FunctionKind.FUNCTION
    assert funcs["add"].is_exported
    assert funcs["add"].has_return
    assert [p.name for p in funcs["add"].parameters] == ["a", "b"]
    assert (funcs["add"].start_line, funcs["add"].end_line) == (8, 10)

    assert funcs["double"].kind is FunctionKind.ARROW
    assert funcs["load"].kind is FunctionKind.ASYNC
    assert not funcs["load"].has_return
    assert funcs["load"].complexity == 3

    assert funcs["constructor"].is_constructor
    assert funcs["greet"].kind is FunctionKind.METHOD
    assert funcs["handle"].kind is FunctionKind.ARROW


def test_ts_functions_sorted_by_line():
    parsed = parse("src/app.ts", TS_SOURCE)
    lines = [f.start_line for f in parsed.functions]
    assert lines == sorted(lines)


def test_ts_class():
    parsed = parse("src/app.ts", TS_SOURCE)
    (cls,) = parsed.classes
    assert cls.name == "Greeter"
    assert cls.extends == "Base"
    assert cls.is_exported
    assert cls.methods == ("constructor", "greet", "handle")
    assert cls.properties == ("name", "count")


def test_ts_imports():
    parsed = parse("src/app.ts", TS_SOURCE)
    modules = [(i.module, i.kind, i.line, i.is_external) for i in parsed.imports]
    assert modules == [
        ("react",        ImportKind.DEFAULT,   1, True),
        ("react",        ImportKind.NAMED,     2, True),
        ("path",         ImportKind.NAMESPACE, 3, True),
        ("./styles.css", ImportKind.DEFAULT,   4, False),
        ("fs",           ImportKind.DEFAULT,   5, True),
        ("./utils",      ImportKind.NAMED,     6, False),
    ]
    assert parsed.imports[1].imported_names == ("useState", "effect")


def test_ts_variables():
    parsed = parse("src/app.ts", TS_SOURCE)
    variables = {v.name: v for v in parsed.variables}
    assert variables["legacy"].declaration_kind is DeclarationKind.VAR
    assert variables["counter"].declaration_kind is DeclarationKind.LET
    assert variables["fs"].declaration_kind is DeclarationKind.CONST
    assert variables["fs"].is_global


def test_js_comments():
    parsed = parse("src/old.js", """\
        // const a = 1;
        // let b = 2;
        /* function old() {} */
        /** Documented function. */
        // plain words
        """)
    kinds = [(c.kind, c.contains_code_like_tokens) for c in parsed.comments]
    assert kinds == [
        (CommentKind.SINGLE, True),
        (CommentKind.SINGLE, True),
        (CommentKind.BLOCK,  True),
        (CommentKind.DOC,    False),
        (CommentKind.SINGLE, False),
    ]


def test_comment_markers_inside_strings_are_ignored():
    parsed = parse("src/a.js", 'const url = "http://example.com";\n')
    assert parsed.comments == ()


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

PY_SOURCE = """\
    import os
    import numpy as np
    from . import utils
    from .models import User, Group as G

    MAX_SIZE = 10
    counter = 0


    class Repo(Base):
        kind = "repo"

        def __init__(self, path):
            self.path = path

        def items(self, a, b=2, *args, **kwargs):
            if a and b:
                return [a]
            return []


    def helper(x):
        print(x)


    square = lambda n: n * n
    """


def test_python_functions():
    parsed = parse("pkg/repo.py", PY_SOURCE)
    funcs = by_name(parsed.functions)
    assert set(funcs) == {"__init__", "items", "helper", "square"}

    assert funcs["__init__"].kind is FunctionKind.METHOD
    assert funcs["__init__"].is_constructor
    assert [p.name for p in funcs["__init__"].parameters] == ["path"]

    items = funcs["items"]
    assert [p.name for p in items.parameters] == ["a", "b", "args", "kwargs"]
    assert items.parameters[1].default == "2"
    assert items.has_return
    assert items.complexity == 3
    assert (items.start_line, items.end_line) == (16, 19)

    assert funcs["helper"].kind is FunctionKind.FUNCTION
    assert not funcs["helper"].has_return
    assert funcs["square"].kind is FunctionKind.ARROW


def test_python_class():
    parsed = parse("pkg/repo.py", PY_SOURCE)
    (cls,) = parsed.classes
    assert cls.name == "Repo"
    assert cls.extends == "Base"
    assert cls.methods == ("__init__", "items")
    assert cls.properties == ("kind", "path")


def test_python_imports():
    parsed = parse("pkg/repo.py", PY_SOURCE)
    modules = [(i.module, i.imported_names, i.is_external) for i in parsed.imports]
    assert modules == [
        ("os",      ("os",),          True),
        ("numpy",   ("np",),          True),
        (".",       ("utils",),       False),
        (".models", ("User", "G"),    False),
    ]


def test_python_variables():
    parsed = parse("pkg/repo.py", PY_SOURCE)
    variables = {v.name: v for v in parsed.variables}
    assert variables["MAX_SIZE"].declaration_kind is DeclarationKind.CONST
    assert variables["counter"].declaration_kind is DeclarationKind.LET
    assert "square" not in variables


def test_python_comments_and_docstrings():
    parsed = parse("pkg/a.py", '''\
        """Module docstring with class words."""
        # def old():
        x = "# not a comment"
        ''')
    kinds = [(c.kind, c.contains_code_like_tokens) for c in parsed.comments]
    assert kinds == [(CommentKind.DOC, False), (CommentKind.SINGLE, True)]


def test_python_generator_counts_as_returning():
    parsed = parse("pkg/gen.py", """\
        def numbers():
            yield 1
        """)
    assert parsed.functions[0].has_return


# ---------------------------------------------------------------------------
# Java
# ---------------------------------------------------------------------------

JAVA_SOURCE = """\
    package com.example;

    import java.util.List;
    import java.util.*;
    import com.example.model.User;

    public class UserService extends BaseService {
        private final List<User> users;
        private int count = 0;

        public UserService(List<User> users) {
            this.users = users;
        }

        public int size() {
            return users.size();
        }

        public void clear() {
            users.clear();
        }

        abstract void reset();
    }
    """


def test_java_members():
    parsed = parse("src/UserService.java", JAVA_SOURCE)
    funcs = by_name(parsed.functions)
    assert set(funcs) == {"UserService", "size", "clear"}
    assert funcs["UserService"].is_constructor
    assert funcs["size"].has_return
    assert not funcs["clear"].has_return
    assert all(f.kind is FunctionKind.METHOD for f in parsed.functions)

    (cls,) = parsed.classes
    assert cls.extends == "BaseService"
    assert cls.is_exported
    assert cls.methods == ("UserService", "size", "clear", "reset")
    assert cls.properties == ("users", "count")


def test_java_imports():
    parsed = parse("src/UserService.java", JAVA_SOURCE)
    assert [(i.module, i.kind) for i in parsed.imports] == [
        ("java.util.List",         ImportKind.NAMED),
        ("java.util",              ImportKind.NAMESPACE),
        ("com.example.model.User", ImportKind.NAMED),
    ]


# ---------------------------------------------------------------------------
# C / C++
# ---------------------------------------------------------------------------

CPP_SOURCE = """\
    #include <vector>
    #include "widget.h"

    class Widget : public Base {
    public:
        Widget(int size);
        int area() const;
        void draw();
    private:
        int width_;
        int height_ = 0;
    };

    int Widget::area() const {
        return width_ * height_;
    }

    static int helper(int a, int b) {
        if (a > b) {
            return a;
        }
        return b;
    }
    """


def test_cpp_functions():
    parsed = parse("src/widget.cpp", CPP_SOURCE)
    funcs = by_name(parsed.functions)
    assert set(funcs) == {"Widget::area", "helper"}
    assert funcs["Widget::area"].kind is FunctionKind.METHOD
    assert funcs["helper"].kind is FunctionKind.FUNCTION
    assert not funcs["helper"].is_exported
    assert funcs["helper"].complexity == 2
    assert len(funcs["helper"].parameters) == 2


def test_cpp_class_and_includes():
    parsed = parse("src/widget.cpp", CPP_SOURCE)
    (cls,) = parsed.classes
    assert cls.name == "Widget"
    assert cls.extends == "Base"
    assert cls.methods == ("Widget", "area", "draw")
    assert cls.properties == ("width_", "height_")
    assert [(i.module, i.is_external) for i in parsed.imports] == [
        ("vector", True),
        ("widget.h", False),
    ]


def test_c_structs_are_not_classes():
    parsed = parse("src/point.c", """\
        struct point {
            int x;
            int y;
        };

        int norm(struct point p) {
            return p.x + p.y;
        }
        """)
    assert parsed.language is Language.C
    assert parsed.classes == ()
    assert [f.name for f in parsed.functions] == ["norm"]


# ---------------------------------------------------------------------------
# Go
# ---------------------------------------------------------------------------

GO_SOURCE = """\
    package main

    import (
    \t"fmt"
    \tstr "strings"
    )

    type Server struct {
    \tName string
    \tport int
    \t*Logger
    }

    func (s *Server) Start(addr string) error {
    \tif s.port == 0 {
    \t\treturn fmt.Errorf("no port")
    \t}
    \treturn nil
    }

    func helper(a, b int) {
    \tfmt.Println(a, b)
    }

    var debug = false
    const Version = "1.0"
    """


def test_go_functions_and_struct():
    parsed = parse("cmd/server.go", GO_SOURCE)
    funcs = by_name(parsed.functions)
    assert funcs["Start"].kind is FunctionKind.METHOD
    assert funcs["Start"].is_exported
    assert funcs["Start"].has_return
    assert funcs["helper"].kind is FunctionKind.FUNCTION
    assert not funcs["helper"].is_exported
    assert len(funcs["helper"].parameters) == 2

    (cls,) = parsed.classes
    assert cls.name == "Server"
    assert cls.methods == ("Start",)
    assert cls.properties == ("Name", "port", "Logger")


def test_go_imports_and_variables():
    parsed = parse("cmd/server.go", GO_SOURCE)
    assert [(i.module, i.imported_names, i.line) for i in parsed.imports] == [
        ("fmt", ("fmt",), 4),
        ("strings", ("str",), 5),
    ]
    kinds = {v.name: v.declaration_kind for v in parsed.variables}
    assert kinds == {"debug": DeclarationKind.LET, "Version": DeclarationKind.CONST}


# ---------------------------------------------------------------------------
# Rust
# ---------------------------------------------------------------------------

RUST_SOURCE = """\
    use std::collections::HashMap;
    use crate::config::{Config, Mode as M};
    use super::util;

    pub struct Cache {
        pub entries: HashMap<String, u32>,
        limit: usize,
    }

    impl Cache {
        pub fn new(limit: usize) -> Self {
            Cache { entries: HashMap::new(), limit }
        }

        pub fn get(&self, key: &str) -> Option<&u32> {
            self.entries.get(key)
        }

        fn clear(&mut self) {
            self.entries.clear();
        }
    }

    fn main() {
        let mut cache = Cache::new(10);
        let size = 3;
    }
    """


def test_rust_functions_and_struct():
    parsed = parse("src/cache.rs", RUST_SOURCE)
    funcs = by_name(parsed.functions)
    assert set(funcs) == {"new", "get", "clear", "main"}
    assert funcs["new"].kind is FunctionKind.METHOD
    assert funcs["new"].has_return
    assert [p.name for p in funcs["get"].parameters] == ["key"]
    assert funcs["clear"].parameters == ()
    assert funcs["main"].kind is FunctionKind.FUNCTION

    (cls,) = parsed.classes
    assert cls.name == "Cache"
    assert cls.is_exported
    assert cls.methods == ("new", "get", "clear")
    assert cls.properties == ("entries", "limit")


def test_rust_imports_and_variables():
    parsed = parse("src/cache.rs", RUST_SOURCE)
    assert [(i.module, i.kind, i.is_external) for i in parsed.imports] == [
        ("std::collections::HashMap", ImportKind.DEFAULT, True),
        ("crate::config",             ImportKind.NAMED,   False),
        ("super::util",               ImportKind.DEFAULT, False),
    ]
    assert parsed.imports[1].imported_names == ("Config", "M")
    kinds = {v.name: v.declaration_kind for v in parsed.variables}
    assert kinds == {"cache": DeclarationKind.LET, "size": DeclarationKind.CONST}


# ---------------------------------------------------------------------------
# File complexity
# ---------------------------------------------------------------------------

def test_file_complexity_sums_functions_classes_and_imports():
    parsed = parse("src/cache.rs", RUST_SOURCE)
    functions = sum(f.complexity for f in parsed.functions)
    # one class: 2 x 3 methods + 2 properties; 3 imports are under the allowance
    assert parsed.complexity == functions + 8


# ---------------------------------------------------------------------------
# Pathological input
# ---------------------------------------------------------------------------

BANNER = "/" + "*" * 40 + "\n * Utilities\n " + "*" * 40 + "/\n"

PATHOLOGICAL = {
    "star banner":    BANNER + " " + "*" * 40 + "/\n" + BANNER,
    "pointer marks":  " " + "*&" * 2000 + "\n",
    "long token":     "x" * 10_000 + "\n",
    "long word list": "a " * 5_000 + "\n",
}

EXTRACTOR_PATHS = ["a.ts", "a.js", "a.py", "A.java", "a.cpp", "a.c", "a.go", "a.rs", "a.txt"]


@pytest.mark.parametrize("path", EXTRACTOR_PATHS)
@pytest.mark.parametrize("name", sorted(PATHOLOGICAL))
def test_extraction_stays_fast_on_pathological_lines(path, name):
    started = time.perf_counter()
    parsed = extract(SourceFile(path, PATHOLOGICAL[name]))
    assert time.perf_counter() - started < 2.0
    assert parsed.path == path


def test_cpp_banner_comment_before_function():
    parsed = extract(SourceFile("src/util.cpp", BANNER + "int add(int a, int b) {\n    return a + b;\n}\n"))
    (func,) = parsed.functions
    assert func.name == "add"
    assert func.start_line == 4
    assert [p.name for p in func.parameters] == ["a", "b"]


def test_cpp_block_commented_function_is_ignored():
    parsed = parse("src/util.c", """\
        /*
        int old(int a) {
            return a;
        }
        */
        int kept(void) {
            return 1;
        }
        """)
    assert [f.name for f in parsed.functions] == ["kept"]


# ---------------------------------------------------------------------------
# Class members
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("path, source", [
    ("src/app.ts",   TS_SOURCE),
    ("src/cache.rs", RUST_SOURCE),
])
def test_class_methods_name_extracted_functions(path, source):
    parsed = parse(path, source)
    (cls,) = parsed.classes
    assert all(isinstance(name, str) for name in cls.methods + cls.properties)
    assert set(cls.methods) <= {f.name for f in parsed.functions}
