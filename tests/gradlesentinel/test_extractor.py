"""End-to-end tests for extract_all_package_files."""

import pytest

from gradlesentinel.engines.dependency_extractor import (
    ExtractConfig,
    ManagerData,
    extract_all_package_files,
)
from gradlesentinel.engines.dependency_extractor.registry_urls import (
    GRADLE_PLUGIN_PORTAL_URL,
    MAVEN_CENTRAL_URL,
)


def _deps(result, package_file):
    for record in result:
        if record.package_file == package_file:
            return record.deps
    raise AssertionError(f"no record for {package_file}")


# ── empty input ──────────────────────────────────────────────────────────


class TestEmpty:
    def test_no_files(self, extract):
        assert extract({}) is None

    def test_empty_files(self, extract):
        assert extract({"gradle.properties": "", "build.gradle": ""}) is None

    def test_only_variables(self, extract):
        assert extract({"gradle.properties": "foo=1.0", "build.gradle": 'bar = "2"'}) is None

    def test_empty_catalog(self, extract):
        assert extract({"gradle/libs.versions.toml": ""}) is None

    def test_unrecognized_files_ignored(self, extract):
        assert extract({"pom.xml": '"foo:bar:1.0"'}) is None


# ── build scripts ────────────────────────────────────────────────────────


class TestScripts:
    def test_literal_dependency(self, extract):
        content = 'dependencies { implementation "foo:bar:1.2.3" }'
        (record,) = extract({"build.gradle": content})
        (dep,) = record.deps
        assert record.datasource == "maven"
        assert dep.dep_name == "foo:bar"
        assert dep.dep_type == "dependency"
        assert dep.current_value == "1.2.3"
        assert dep.manager_data == ManagerData("build.gradle", content.index("1.2.3"))
        assert dep.registry_urls == [MAVEN_CENTRAL_URL]
        assert dep.skip_reason is None

    def test_variable_in_properties_moves_record(self, extract):
        result = extract(
            {
                "build.gradle": 'url "https://example.com"; "foo:bar:$baz"',
                "gradle.properties": "baz=1.2.3",
            }
        )
        assert [r.package_file for r in result] == ["gradle.properties", "build.gradle"]
        (dep,) = result[0].deps
        assert dep.dep_name == "foo:bar"
        assert dep.current_value == "1.2.3"
        assert dep.group_name == "baz"
        assert dep.manager_data == ManagerData("gradle.properties", 4)
        assert dep.registry_urls == [MAVEN_CENTRAL_URL, "https://example.com"]
        assert result[1].deps == []

    def test_extension_and_unreadable_settings(self, extract):
        result = extract(
            {
                "build.gradle": 'url "https://example.com"; "foo:bar:$baz@zip"',
                "gradle.properties": "baz=1.2.3",
                "settings.gradle": None,
            }
        )
        assert [r.package_file for r in result] == [
            "gradle.properties",
            "settings.gradle",
            "build.gradle",
        ]
        assert result[0].deps[0].current_value == "1.2.3"
        assert result[1].deps == [] and result[1].datasource == "maven"
        assert result[2].deps == []

    def test_inherits_from_parent_directories(self, extract):
        files = {
            "gradle.properties": "foo=1.0.0",
            "build.gradle": 'foo = "1.0.1"',
            "aaa/gradle.properties": 'bar = "2.0.0"',
            "aaa/build.gradle": 'bar = "2.0.1"',
            "aaa/bbb/build.gradle": '"foo:foo:$foo"\n"bar:bar:$bar"',
        }
        result = extract(files)
        assert [r.package_file for r in result] == list(files)
        assert [len(r.deps) for r in result] == [0, 1, 0, 1, 0]

        (foo,) = _deps(result, "build.gradle")
        assert (foo.dep_name, foo.current_value) == ("foo:foo", "1.0.1")
        assert foo.file_replace_position == 7

        (bar,) = _deps(result, "aaa/build.gradle")
        assert (bar.dep_name, bar.current_value) == ("bar:bar", "2.0.1")
        assert bar.manager_data.package_file == "aaa/build.gradle"

    def test_multiple_variables(self, extract):
        content = 'foo = "1"; bar = "2"; baz = "3"; "foo:bar:$foo.$bar.$baz"'
        (record,) = extract({"build.gradle": content})
        (dep,) = record.deps
        assert dep.current_value == "1.2.3"
        assert dep.skip_reason == "contains-variable"
        assert dep.file_replace_position is None
        assert dep.manager_data.package_file == "build.gradle"
        assert dep.registry_urls == [MAVEN_CENTRAL_URL]

    def test_variable_with_static_suffix(self, extract):
        result = extract(
            {
                "gradle.properties": "v=31.0",
                "build.gradle": '"com.google.guava:guava:${v}-jre"',
            }
        )
        assert _deps(result, "gradle.properties") == []
        (dep,) = _deps(result, "build.gradle")
        assert dep.current_value == "31.0-jre"
        assert dep.skip_reason == "contains-variable"
        assert dep.file_replace_position is None

    def test_exact_reference_reports_binding_value(self, extract):
        content = 'ver = "1.0"\n"foo:bar:${ver}"'
        (record,) = extract({"build.gradle": content})
        (dep,) = record.deps
        assert dep.current_value == "1.0"
        assert dep.skip_reason is None
        assert dep.group_name == "ver"
        assert dep.file_replace_position == content.index("1.0")

    def test_unknown_variable(self, extract):
        (record,) = extract({"build.gradle": '"foo:bar:$nope"'})
        (dep,) = record.deps
        assert dep.skip_reason == "unknown-version"
        assert dep.current_value is None
        assert dep.file_replace_position is None

    def test_sibling_variables_not_visible(self, extract):
        result = extract(
            {
                "a/build.gradle": 'ver = "1.0"',
                "b/build.gradle": '"foo:bar:$ver"',
            }
        )
        assert _deps(result, "b/build.gradle")[0].skip_reason == "unknown-version"

    def test_registry_urls_deduplicated(self, extract):
        content = "\n".join(
            [
                'url "https://repo.maven.apache.org/maven2"',
                'url "https://repo.maven.apache.org/maven2"',
                'url "https://example.com"',
                'url "https://example.com"',
                "id 'foo.bar' version '1.2.3'",
                '"foo:bar:1.2.3"',
            ]
        )
        (record,) = extract({"build.gradle": content})
        plugin, dep = record.deps
        assert plugin.dep_type == "plugin"
        assert plugin.registry_urls == [
            MAVEN_CENTRAL_URL,
            GRADLE_PLUGIN_PORTAL_URL,
            "https://example.com",
        ]
        assert dep.registry_urls == [MAVEN_CENTRAL_URL, "https://example.com"]

    def test_registry_url_from_variable(self, extract):
        result = extract(
            {
                "gradle.properties": "repoBase=https://nexus.example.com",
                "build.gradle": 'url "${repoBase}/releases"\nurl "$missing/x"\n"foo:bar:1.0"',
            }
        )
        (dep,) = _deps(result, "build.gradle")
        assert dep.registry_urls == [MAVEN_CENTRAL_URL, "https://nexus.example.com/releases"]

    def test_plugin_record(self, extract):
        content = "plugins { id 'org.x.plugin' version '0.9' }"
        (record,) = extract({"build.gradle": content})
        (dep,) = record.deps
        assert dep.dep_name == "org.x.plugin"
        assert dep.package_name == "org.x.plugin:org.x.plugin.gradle.plugin"
        assert dep.commit_message_topic == "plugin org.x.plugin"
        assert dep.file_replace_position == content.index("0.9")

    def test_kotlin_dsl(self, extract, load_fixture):
        content = load_fixture("build.gradle.kts")
        (record,) = extract({"build.gradle.kts": content})
        kotlin, publish, okhttp, kotest = record.deps

        assert kotlin.dep_name == "org.jetbrains.kotlin.jvm"
        assert kotlin.current_value == "1.5.21"
        assert kotlin.registry_urls == [
            MAVEN_CENTRAL_URL,
            GRADLE_PLUGIN_PORTAL_URL,
            "https://jitpack.io",
            "https://maven.example.com/releases",
        ]

        assert publish.current_value == "0.5.0"
        assert publish.group_name == "publishVersion"
        assert publish.file_replace_position == content.index('"0.5.0"') + 1

        assert okhttp.dep_name == "com.squareup.okhttp3:okhttp"
        assert okhttp.registry_urls == [
            MAVEN_CENTRAL_URL,
            "https://jitpack.io",
            "https://maven.example.com/releases",
        ]

        assert kotest.dep_name == "io.kotest:kotest-runner-junit5"
        assert kotest.file_replace_position == content.index("4.6.0")

    def test_dependency_in_properties_uses_directory_urls(self, extract):
        result = extract(
            {
                "gradle.properties": "lib=com.example:lib:1.2.3",
                "build.gradle": 'url "https://example.com"',
            }
        )
        (dep,) = _deps(result, "gradle.properties")
        assert dep.current_value == "1.2.3"
        assert dep.registry_urls == [MAVEN_CENTRAL_URL, "https://example.com"]


# ── version catalogs ─────────────────────────────────────────────────────


class TestCatalogs:
    def test_catalog_records(self, extract, load_fixture):
        content = load_fixture("libs.versions.toml")
        (record,) = extract({"gradle/libs.versions.toml": content})
        assert len(record.deps) == 10
        assert all(d.manager_data.package_file == "gradle/libs.versions.toml" for d in record.deps)

        first = record.deps[0]
        assert first.registry_urls == [MAVEN_CENTRAL_URL]
        plugin = record.deps[7]
        assert plugin.registry_urls == [MAVEN_CENTRAL_URL, GRADLE_PLUGIN_PORTAL_URL]

    def test_indented_catalog_with_plugins_first(self, extract):
        content = (
            "\n"
            "    [versions]\n"
            '    detekt = "1.18.1"\n'
            "\n"
            "    [plugins]\n"
            '    detekt = { id = "io.gitlab.arturbosch.detekt", version.ref = "detekt" }\n'
            "\n"
            "    [libraries]\n"
            '    detekt-formatting = { module = "io.gitlab.arturbosch.detekt:detekt-formatting", version.ref = "detekt" }\n'
        )
        (record,) = extract({"gradle/libs.versions.toml": content})
        library, plugin = record.deps

        assert library.dep_name == "io.gitlab.arturbosch.detekt:detekt-formatting"
        assert library.group_name == "detekt"
        assert library.file_replace_position == 30

        assert plugin.dep_name == "io.gitlab.arturbosch.detekt"
        assert plugin.dep_type == "plugin"
        assert plugin.group_name == "detekt"
        assert plugin.commit_message_topic is None
        assert plugin.file_replace_position == 30

    def test_skipped_entries_have_no_position(self, extract, load_fixture):
        (record,) = extract({"libs.versions.toml": load_fixture("libs.versions.toml")})
        skipped = [d for d in record.deps if d.skip_reason]
        assert {d.dep_name for d in skipped} == {"guava", "gson", "org.ajoberstar.grgit"}
        assert all(d.file_replace_position is None for d in skipped)

    def test_invalid_catalog_keeps_other_files(self, extract):
        result = extract(
            {
                "build.gradle": '"foo:bar:1.0"',
                "gradle/libs.versions.toml": "[versions\nbroken",
            }
        )
        assert [r.package_file for r in result] == ["build.gradle", "gradle/libs.versions.toml"]
        assert result[1].deps == []

    def test_catalog_ignores_script_registries(self, extract):
        result = extract(
            {
                "build.gradle": 'url "https://example.com"',
                "libs.versions.toml": '[libraries]\nfoo = "a:b:1.0"\n',
            }
        )
        (dep,) = _deps(result, "libs.versions.toml")
        assert dep.registry_urls == [MAVEN_CENTRAL_URL]


# ── batch behaviour ──────────────────────────────────────────────────────


class TestBatch:
    def test_reader_errors_do_not_abort(self):
        def reader(path):
            if path == "a/build.gradle":
                raise OSError("permission denied")
            return '"foo:bar:1.0"'

        result = extract_all_package_files(["a/build.gradle", "build.gradle"], reader)
        assert [r.package_file for r in result] == ["build.gradle", "a/build.gradle"]
        assert result[1].deps == []

    def test_bytes_content(self):
        result = extract_all_package_files(["build.gradle"], {"build.gradle": b'"foo:bar:1.0"'})
        assert result[0].deps[0].current_value == "1.0"

    def test_missing_from_mapping(self):
        result = extract_all_package_files(
            ["build.gradle", "sub/build.gradle"], {"build.gradle": '"foo:bar:1.0"'}
        )
        assert [r.package_file for r in result] == ["build.gradle", "sub/build.gradle"]

    def test_deterministic(self, extract, load_fixture):
        files = {
            "gradle.properties": "baz=1.2.3",
            "build.gradle.kts": load_fixture("build.gradle.kts"),
            "build.gradle": '"foo:bar:$baz"',
            "gradle/libs.versions.toml": load_fixture("libs.versions.toml"),
        }
        assert extract(files) == extract(files)

    def test_every_dependency_is_routed_once(self, extract, load_fixture):
        files = {
            "gradle.properties": "baz=1.2.3",
            "build.gradle": '"foo:bar:$baz"\n"foo:qux:2.0"',
            "sub/build.gradle.kts": load_fixture("build.gradle.kts"),
        }
        result = extract(files)
        for record in result:
            for dep in record.deps:
                assert dep.manager_data.package_file == record.package_file
        assert sum(len(r.deps) for r in result) == 6

    def test_positioned_values_match_source_text(self, extract, load_fixture):
        files = {
            "gradle.properties": "v=31.0\nbaz=1.2.3\nlib=com.example:lib:4.0",
            "build.gradle": (
                '"com.google.guava:guava:${v}-jre"\n'
                '"foo:bar:$baz"\n'
                '"foo:qux:2.0"\n'
                "id 'x.y' version '0.1'"
            ),
            "sub/build.gradle.kts": load_fixture("build.gradle.kts"),
            "gradle/libs.versions.toml": load_fixture("libs.versions.toml"),
            "gradle/notations.versions.toml": load_fixture("notations.versions.toml"),
        }
        positioned = [
            (record.package_file, dep)
            for record in extract(files)
            for dep in record.deps
            if dep.file_replace_position is not None
        ]
        assert len(positioned) > 10
        for package_file, dep in positioned:
            text = files[package_file]
            assert text[dep.file_replace_position :].startswith(dep.current_value), dep
            assert dep.skip_reason is None

    def test_custom_config(self, extract):
        config = ExtractConfig(
            default_registry_url="https://mirror.example.com/maven",
            plugin_registry_url="https://mirror.example.com/plugins",
            datasource="maven-mirror",
        )
        (record,) = extract({"build.gradle": "id 'a.b' version '1.0'"}, config=config)
        assert record.datasource == "maven-mirror"
        assert record.deps[0].registry_urls == [
            "https://mirror.example.com/maven",
            "https://mirror.example.com/plugins",
        ]

    @pytest.mark.parametrize(
        "order",
        [
            ["build.gradle", "gradle.properties"],
            ["gradle.properties", "build.gradle"],
        ],
    )
    def test_caller_order_does_not_change_resolution(self, extract, order):
        files = {"gradle.properties": "v=1.0", "build.gradle": '"foo:bar:$v"'}
        result = extract(files, order=order)
        assert result[0].package_file == "gradle.properties"
        assert result[0].deps[0].current_value == "1.0"
