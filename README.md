# qqbotplug

Building blocks for a group chat bot. Each module holds the logic of one
plugin and knows nothing of any bot framework, so you call it from your own
message handlers and send what it returns.

## Installation

```
pip install .
```

Add the `test` extra to get the test runner: `pip install .[test]`.

## Modules

- `qqbotplug.timer_model`: `Timer`, the group reminder record. Its month,
  day, weekday, hour and minute are packed into one integer (`packed`) and
  read and written through properties (`month`, `day`, `week`, `hour`,
  `minute`, `enabled`); -1 means "every". `timer_info` and `timer_id` are
  properties giving its normalised description and its id.
  `filled_timer(date_strs, botqq, grp, match_date_only)` builds a timer from
  the groups of a reminder written in Chinese; an invalid field leaves it
  disabled with the reason in `alert`. `filled_cron_timer` builds one from a
  cron expression. `chinese_num_to_int` reads numbers such as `二十三` or
  `每`.
- `qqbotplug.schedule`: `next_wake_time(timer, now)` works out when a
  date-based timer should next be checked, `is_due(timer, now)` whether it
  fires now, and `first_week(date, week)` the first given weekday of a month.
- `qqbotplug.clock`:
  - `TimerStore` keeps timers in a SQLite file.
  - `Clock(store, sender)` loads the stored timers and runs each in a
    background thread; `register_timer`, `cancel_timer`, `list_timers` and
    `close` manage them. When a reminder fires, `sender(self_id, group_id,
    segments)` is called with the segments from `build_alert`.
  - `CronSpec` parses five-field cron expressions and `@daily`-style
    descriptors and finds the next firing minute.
- `qqbotplug.moderation`: mute lengths (`ban_minutes`), CQ unescaping,
  welcome and farewell templates (`render_welcome` fills `{at}`,
  `{nickname}`, `{avatar}`, `{uid}`, `{gid}` and `{groupname}`), the join quiz
  (`make_quiz`, `check_answer`), the random member pick and the on/off flag
  words (`toggle_flag`).
- `qqbotplug.manager`: `MemberStore` (SQLite) for welcome and farewell texts
  and verified members; `parse_gist_answer`, `gist_url` and `check_new_user`
  approve join requests through a gist holding a recent unix timestamp.
- `qqbotplug.holiday`: `Holiday`, `parse_holiday`, `format_holiday`,
  `weekend` and `moyu_message` build the daily countdown to the weekend and
  holidays.
- `qqbotplug.midi`:
  - `build_midi` and `write_midi` turn note strings such as
    `CCGGAAGR FFEEDDCR` into a violin MIDI track; unreadable characters raise
    `MidiParseError`.
  - `str_to_music` also renders the MIDI to WAV by running the external
    `timidity` program, which must be installed.
  - `ListeningPractice` runs the five-round ear-training game, alone or as a
    team.
- `qqbotplug.hyaku`: `load_poems` reads the Ogura Hyakunin Isshu CSV into
  `Poem` records; `image_urls` gives a poem's pictures.
- `qqbotplug.nsfw`: `judge` and `autojudge` turn `NsfwScores` into a verdict.
- `qqbotplug.omikuji`: `KujiStore` (SQLite) of fortune slip texts and
  `omikuji_images` for the slip pictures.
- `qqbotplug.jandan`: `PictureStore` (SQLite) of picture URLs keyed by
  CRC-64, page parsers, and `update(store, fetch)`, which walks back through
  the listing pages until it meets a known picture.
- `qqbotplug.nativesetu`: `SetuStore` indexes local picture folders by
  `difference_hash` and picks, counts and summarises them.
- `qqbotplug.nativewife`: per-group picture folders; `draw_wife` picks the
  same picture for a name all day.
- Web lookups, using `requests`:
  - `qqbotplug.github`: `search_repo`, `format_repo`, `preview_url`;
  - `qqbotplug.nbnhhsh`: `guess` for the meanings of abbreviations;
  - `qqbotplug.juejuezi`: the 绝绝子 phrase generator;
  - `qqbotplug.hearthstone`: `search_cards` and `deck_image`;
  - `qqbotplug.image_finder`: `search` for illustrations by keyword,
    `describe_illust` for their summary.

## Example

```python
from datetime import datetime
from qqbotplug.timer_model import filled_timer
from qqbotplug.schedule import next_wake_time

t = filled_timer(["", "12", "周六", "16", "30", "", "下班啦"], 0, 1234, False)
print(t.timer_info)
print(next_wake_time(t, datetime.now()))
```

## What it does not do

The package does not connect to a chat server, receive events or match
commands in messages, and it has no command-line program. Permission checks,
sending messages and downloading pictures are left to the code that calls
it; `Clock` only calls the `sender` you give it.

## Running the tests

```
pytest
```