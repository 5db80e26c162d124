# appimage_helpers

Building blocks for tools that prepare AppDirs, inspect AppImage runtimes and
announce new AppImage versions. This is a library: import the modules you need.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `appimage_helpers.appdir`
  - `AppDir.from_desktop_file(path)` takes a desktop file that sits four
    levels below the AppDir root, such as
    `<AppDir>/usr/share/applications/app.desktop`. The root must contain
    `usr/bin`.
  - It copies the desktop file to the root and requires exactly one
    top-level `.desktop` file there. It checks the file with
    `check_desktop_file` and rejects `Exec=` and `Icon=` values that contain
    a path.
  - It sets `main_executable` to `<AppDir>/usr/bin/<Exec>`.
  - It copies the best-sized `hicolor` PNG icon to the root, unless an icon
    is already there.
  - `create_icon_directories()` makes the standard `hicolor` size
    directories.
  - `get_elf_interpreter()` asks `patchelf` for the interpreter of the main
    executable.
  - Problems raise `AppDirError`, `DesktopFileError` or
    `subprocess.CalledProcessError`.
- `appimage_helpers.desktopfile`
  - `load_desktop_file()` parses a desktop file into a dict of sections. A
    `;` inside a value is kept.
  - `check_desktop_file()` requires `Categories`, `Name`, `Exec`, `Type` and
    `Icon`. `Icon` must be a bare name with no path and no image suffix.
  - `check_if_exec_file_exists()` tests whether the `X-ExecLocation` target of
    a desktop file exists.
  - `delete_desktop_files_with_non_existing_targets()` removes
    `appimagekit_*.desktop` files whose target is gone and returns the paths
    it removed.
  - `get_values_for_all_desktop_files(key)` collects the values of one key
    from the live desktop files.
  - Both of the last two default to `$XDG_DATA_HOME/applications`; see
    `xdg_data_home()`.
- `appimage_helpers.updateinformation`
  - `validate_update_information()` checks an update information string and
    raises `UpdateInformationError` if it is invalid.
  - `parse_update_information()` also splits the string into a frozen
    `UpdateInformation`. It accepts `zsync`, `gh-releases-zsync` and
    `bintray-zsync`.
- `appimage_helpers.elf`
  - `get_section_data()` and `get_section_offset_and_length()` read sections
    of 32- and 64-bit ELF files.
  - `get_elf_architecture()` returns the architecture, such as `x86_64`,
    `i686`, `armhf` or `aarch64`.
  - `calculate_elf_size()` returns the size of the ELF part of a file, which
    is where an appended payload starts.
  - `embed_string_in_segment()` writes text into an existing section. It
    raises `ElfError` if the section is missing or too small.
- `appimage_helpers.digest`
  - `calculate_sha256_digest(path)` returns the hex SHA-256 of a file, with
    its `.sha256_sig` and `.sig_key` sections counted as zero bytes.
  - `calculate_digest_skipping_ranges()` does the same for arbitrary
    `ByteRange`s.
- `appimage_helpers.ossl`: AES-256-CBC encryption in the `Salted__` format of
  `openssl enc`, with MD5 key derivation.
  - `encrypt` and `decrypt` work on bytes.
  - `encrypt_base64` and `decrypt_base64` work on base64-encoded bytes.
  - `encrypt_string` and `decrypt_string` work on text.
  - `extract_key_and_iv` derives the key and IV.
  - Bad input raises `OpenSSLError`.
- `appimage_helpers.github`: queries the GitHub REST API. Each function
  accepts an optional `requests.Session`, and failures raise `GitHubError`.
  - `get_release_url(ui)` returns the release URL for `gh-releases-zsync`
    update information.
  - `get_commit_message_for_latest_commit(ui)` returns the commit message of
    that release.
  - `get_commit_message_for_this_commit_on_travis()` uses `TRAVIS_COMMIT` and
    `TRAVIS_REPO_SLUG`.
- `appimage_helpers.mqtt`
  - `publish_mqtt_message(update_information, version)` publishes the version
    as a retained QoS 2 message to the broker in `MQTT_SERVER_URI`.
  - The topic comes from `topic_for()`: `MQTT_NAMESPACE`, then the
    query-escaped update information, then `/version`.
  - `PubSubData` holds a name, version and timestamp and converts to and from
    JSON.
- `appimage_helpers.tools`
  - `print_error()` and `log_error()` report errors to stderr.
  - `add_dirs_to_path()` and `add_here_to_path()` prepend directories to
    `$PATH`.
  - `is_command_available()`, `check_for_needed_tools()` and
    `check_if_all_tools_are_present()` check tools on `$PATH`. The last two
    raise `ToolMissingError`.
  - `check_if_squashfs_version_sufficient()` requires version 4.4 or later.
  - `validate_desktop_file()` runs `desktop-file-validate`.
  - `validate_appstream_metainfo_file()` runs `appstreamcli validate-tree`.
  - `run_cmd_transparently()` and `run_cmd_string_transparently()` run a
    command attached to the terminal.
- `appimage_helpers.fsutil`: small file-system utilities.
  - `copy_file()` copies a file.
  - `exists()`, `is_directory()` and the `check_if_*_exists` functions test
    paths.
  - The `files_with_*` functions list files by suffix or prefix.
  - `find_most_recent_file()` returns the most recently modified file.
  - `replace_text_in_file()` replaces text inside a file.
  - `write_file_into_other_file_at_offset()` and
    `write_string_into_other_file_at_offset()` write into a file at an
    offset.
  - `check_magic_at_offset()` and `check_magic_at_offset_bytes()` look for
    magic bytes.
  - `append_if_missing()` appends an item to a list only if it is absent.
- `appimage_helpers.gitrepo`: `find_git_repository()` returns the root of the
  enclosing git repository. If there is none it raises
  `NotAGitRepositoryError`.
- `appimage_helpers.watchdog_timer`: `Watchdog(interval, callback)` calls the
  callback once after `interval` seconds. `kick()` restarts the delay and
  `stop()` cancels it.

## Example

```python
from appimage_helpers.updateinformation import parse_update_information

ui = parse_update_information(
    "gh-releases-zsync|user|project|latest|App*-x86_64.AppImage.zsync"
)
print(ui.username, ui.repository, ui.release_name)
```

## What it does not do

- There is no command-line tool. The package does not assemble an AppImage
  from an AppDir and does not run squashfs tools itself.
- It does not integrate AppImages into the desktop or listen for update
  messages.
- It does not create keys, sign AppImages or verify their signatures. The
  digest it computes is only the input that such signing would use.