from contactbook.settings import Settings, load_settings


def _write(tmp_path, text):
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_env_var_wins(tmp_path, tmp_db_path):
    cfg = _write(tmp_path, "db_path: /somewhere/else.db\n")
    assert load_settings(cfg).db_path == tmp_db_path


def test_test_db_path_used_under_pytest(tmp_path, monkeypatch):
    monkeypatch.delenv("CONTACTS_DB_PATH", raising=False)
    cfg = _write(tmp_path, "db_path: prod.db\ntest_db_path: test.db\n")
    assert load_settings(cfg).db_path == "test.db"


def test_yaml_flags_are_read(tmp_path, monkeypatch):
    monkeypatch.delenv("CONTACTS_DB_PATH", raising=False)
    cfg = _write(
        tmp_path,
        "db_path: prod.db\nvalidate_name_on_update: false\nlog_level: DEBUG\noperation_log: false\n",
    )
    s = load_settings(cfg)
    assert s.db_path == "prod.db"
    assert s.validate_name_on_update is False
    assert s.log_level == "DEBUG"
    assert s.operation_log is False


def test_missing_or_broken_file_falls_back_to_defaults(tmp_path, tmp_db_path):
    assert load_settings(str(tmp_path / "nope.yaml")) == Settings(db_path=tmp_db_path)
    broken = _write(tmp_path, "db_path: [unclosed\n")
    assert load_settings(broken).validate_name_on_update is True


def test_wrong_typed_values_fall_back_to_defaults(tmp_path, tmp_db_path):
    cfg = _write(tmp_path, "validate_name_on_update: maybe\noperation_log: false\n")
    assert load_settings(cfg) == Settings(db_path=tmp_db_path)
