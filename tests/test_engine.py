from cssmodules.engine import make_specifier_resolver


def test_app_alias_resolves_against_app_directory() -> None:
    resolve = make_specifier_resolver("/app")

    assert resolve("~/shared/vars.css", "/app/routes/deep/page.module.css") == "/app/shared/vars.css"
    assert resolve("~/shared/vars.css", "/elsewhere/x.module.css") == "/app/shared/vars.css"


def test_relative_specifiers_resolve_against_importer_directory() -> None:
    resolve = make_specifier_resolver("/app")

    assert resolve("./theme.css", "/app/styles/button.module.css") == "/app/styles/theme.css"
    assert resolve("../base.css", "/app/styles/button.module.css") == "/app/base.css"
