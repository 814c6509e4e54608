from pathlib import Path

from network_limiter.pf.persistence import (
    AnchorInstaller,
    anchor_block,
    insert_anchor_block,
    strip_anchor_block,
)


def test_anchor_block_format(config):
    block = anchor_block(config.paths)
    assert block.splitlines() == [
        "# BEGIN network-limiter",
        'anchor "network-limiter"',
        f'load anchor "network-limiter" from "{config.paths.anchor_file}"',
        "# END network-limiter",
    ]


def test_insert_is_idempotent(config):
    once = insert_anchor_block("anchor \"com.apple/*\"", config.paths)
    twice = insert_anchor_block(once, config.paths)
    assert once == twice
    assert once.count("# BEGIN network-limiter") == 1
    assert once.startswith('anchor "com.apple/*"\n# BEGIN')


def test_strip_restores_original(config):
    original = 'anchor "com.apple/*"\npass all\n'
    assert strip_anchor_block(insert_anchor_block(original, config.paths), config.paths) == original


def test_install_copies_rules_and_registers_anchor(config, runner, tmp_path):
    rules = tmp_path / "pf.rules"
    rules.write_text("# Monitoring rules\n")
    installer = AnchorInstaller(config.paths, runner)

    assert installer.install(str(rules)) is True

    assert Path(config.paths.anchor_file).read_text() == "# Monitoring rules\n"
    assert installer.marker_present()
    assert Path(config.paths.pf_conf_backup).exists()
    assert f"cp {rules} {config.paths.anchor_file}" in runner.commands()


def test_second_install_leaves_pf_conf_untouched(config, runner, tmp_path):
    rules = tmp_path / "pf.rules"
    rules.write_text("# Monitoring rules\n")
    installer = AnchorInstaller(config.paths, runner)

    installer.install(str(rules))
    after_first = Path(config.paths.pf_conf).read_text()
    runner.calls.clear()

    assert installer.install(str(rules)) is False
    assert Path(config.paths.pf_conf).read_text() == after_first
    # Anchor file is refreshed, backup is not retaken
    assert runner.commands() == [f"cp {rules} {config.paths.anchor_file}"]


def test_uninstall_removes_anchor_and_marker(config, runner, tmp_path):
    rules = tmp_path / "pf.rules"
    rules.write_text("# Monitoring rules\n")
    original = Path(config.paths.pf_conf).read_text()
    installer = AnchorInstaller(config.paths, runner)
    installer.install(str(rules))

    installer.uninstall()

    assert not installer.anchor_installed()
    assert not installer.marker_present()
    assert Path(config.paths.pf_conf).read_text() == original


def test_similar_marker_does_not_count_as_registered(config, runner, tmp_path):
    Path(config.paths.pf_conf).write_text(
        "# BEGIN network-limiter-old\n"
        'anchor "network-limiter-old"\n'
        "# END network-limiter-old\n"
    )
    rules = tmp_path / "pf.rules"
    rules.write_text("# Monitoring rules\n")
    installer = AnchorInstaller(config.paths, runner)

    assert not installer.marker_present()
    assert installer.install(str(rules)) is True

    text = Path(config.paths.pf_conf).read_text()
    assert text.startswith("# BEGIN network-limiter-old\n")
    assert text.count("# BEGIN network-limiter\n") == 1
