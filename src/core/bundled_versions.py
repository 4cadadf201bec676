"""Bundled list of published engine versions.

Used when the repository query fails (offline, proxy trouble) or is bypassed
with `OPENAPI_GENERATOR_CLI_SEARCH_URL=DEFAULT`, so the tool stays usable.
Tags are derived from the version strings, exactly as for live results.
"""

from __future__ import annotations

from datetime import datetime


KNOWN_VERSIONS: tuple[tuple[str, str], ...] = (
    ("7.15.0", "2025-08-22T06:24:58.285Z"),
    ("7.14.0", "2025-06-25T06:24:58.285Z"),
    ("7.13.0", "2025-04-25T06:24:58.285Z"),
    ("7.12.0", "2025-02-28T06:24:58.285Z"),
    ("7.11.0", "2025-01-20T06:24:58.285Z"),
    ("7.10.0", "2024-11-08T06:24:58.285Z"),
    ("7.9.0", "2024-10-07T06:24:58.285Z"),
    ("7.8.0", "2024-08-19T06:24:58.285Z"),
    ("7.7.0", "2024-07-02T08:03:44.452Z"),
    ("7.6.0", "2024-05-20T09:07:21.579Z"),
    ("7.5.0", "2024-04-17T08:42:14.968Z"),
    ("7.4.0", "2024-03-11T02:28:09.325Z"),
    ("7.3.0", "2024-02-08T07:39:15.042Z"),
    ("7.2.0", "2023-12-22T07:12:33.120Z"),
    ("7.1.0", "2023-11-13T09:44:25.982Z"),
    ("7.0.1", "2023-09-18T09:09:18.699Z"),
    ("7.0.0", "2023-08-25T07:21:58.000Z"),
    ("7.0.0-beta", "2023-07-06T08:20:49.000Z"),
    ("6.6.0", "2023-05-11T02:17:01.000Z"),
    ("6.5.0", "2023-04-01T07:18:53.000Z"),
    ("6.4.0", "2023-02-19T11:09:30.000Z"),
    ("6.3.0", "2023-02-01T13:08:43.000Z"),
    ("6.2.1", "2022-11-01T09:44:24.000Z"),
    ("6.2.0", "2022-09-24T14:10:07.000Z"),
    ("6.1.0", "2022-09-11T09:46:14.000Z"),
    ("6.0.1", "2022-07-03T16:24:08.000Z"),
    ("6.0.0", "2022-05-26T02:56:46.000Z"),
    ("6.0.0-beta", "2022-04-04T03:01:01.000Z"),
    ("5.4.0", "2022-01-31T05:34:05.000Z"),
    ("5.3.1", "2021-12-21T10:49:56.000Z"),
    ("5.3.0", "2021-10-24T14:53:19.000Z"),
    ("5.2.1", "2021-08-16T12:55:33.000Z"),
    ("5.2.0", "2021-07-09T09:44:53.000Z"),
    ("5.1.1", "2021-05-07T02:35:53.000Z"),
    ("5.1.0", "2021-03-20T09:21:09.000Z"),
    ("5.0.1", "2021-02-06T09:16:59.000Z"),
    ("5.0.0", "2020-12-21T05:42:21.000Z"),
    ("5.0.0-beta3", "2020-11-20T08:54:14.000Z"),
    ("5.0.0-beta2", "2020-09-04T05:38:38.000Z"),
    ("5.0.0-beta", "2020-06-29T15:49:53.000Z"),
    ("4.3.1", "2020-05-06T09:43:40.000Z"),
    ("4.3.0", "2020-03-27T04:03:55.000Z"),
    ("4.2.3", "2020-01-31T08:56:15.000Z"),
    ("4.2.2", "2019-12-02T05:46:08.000Z"),
    ("4.2.1", "2019-11-15T08:50:59.000Z"),
    ("4.2.0", "2019-10-31T04:09:29.000Z"),
    ("4.1.3", "2019-10-04T06:18:41.000Z"),
    ("4.1.2", "2019-09-11T11:10:43.000Z"),
    ("4.1.1", "2019-08-26T08:32:17.000Z"),
    ("4.1.0", "2019-08-09T15:01:49.000Z"),
    ("4.0.3", "2019-07-09T13:19:51.000Z"),
    ("4.0.2", "2019-06-20T05:07:08.000Z"),
    ("4.0.1", "2019-05-31T16:12:03.000Z"),
    ("4.0.0", "2019-05-13T13:27:43.000Z"),
    ("4.0.0-beta3", "2019-04-04T13:22:16.000Z"),
    ("4.0.0-beta2", "2019-01-31T23:40:38.000Z"),
    ("4.0.0-beta", "2018-12-31T09:43:08.000Z"),
    ("3.3.4", "2018-11-30T17:36:10.000Z"),
    ("3.3.3", "2018-11-15T03:52:20.000Z"),
    ("3.3.2", "2018-10-31T13:22:25.000Z"),
    ("3.3.1", "2018-10-15T15:55:02.000Z"),
    ("3.3.0", "2018-10-01T16:35:32.000Z"),
    ("3.2.3", "2018-08-30T11:39:38.000Z"),
    ("3.2.2", "2018-08-22T09:17:07.000Z"),
    ("3.2.1", "2018-08-14T10:20:10.000Z"),
    ("3.2.0", "2018-08-06T14:35:21.000Z"),
    ("3.1.2", "2018-07-25T16:40:54.000Z"),
    ("3.1.1", "2018-07-18T08:02:30.000Z"),
    ("3.1.0", "2018-07-06T16:06:08.000Z"),
    ("3.0.3", "2018-06-27T14:14:10.000Z"),
    ("3.0.2", "2018-06-18T06:09:22.000Z"),
    ("3.0.1", "2018-06-11T16:20:09.000Z"),
    ("3.0.0", "2018-06-01T10:33:24.000Z"),
)


def known_release_dates() -> list[tuple[str, datetime]]:
    return [
        (version, datetime.fromisoformat(released.replace("Z", "+00:00")))
        for version, released in KNOWN_VERSIONS
    ]
