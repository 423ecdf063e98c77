# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass
from typing import List, Optional, Sequence

from FITInspector.model import File
from FITInspector.profile import DEFAULT_PROFILE, Profile


@dataclass(frozen=True)
class ReportRow:
    table: str
    key: str
    value: str


def _crc_str(crc: Optional[int]) -> str:
    return 'none' if crc is None else f'0x{crc:04X}'


def describe(file: File, file_name: Optional[str] = None, size: Optional[int] = None, profile: Profile = DEFAULT_PROFILE) -> List[ReportRow]:
    """
    Summary of a decoded file as (table, key, value) rows, the tables being file, header, contents and footer
    """
    rows = []

    if file_name is not None:
        info = file_name if size is None else f'{file_name} ({size} bytes)'
        rows.append(ReportRow('file', 'Name', info))

    header = file.header
    rows.append(ReportRow('header', 'Header size', f'{header.header_size} B'))
    rows.append(ReportRow('header', 'Protocol version', header.protocol_version_str))
    rows.append(ReportRow('header', 'Profile version', header.profile_version_str))
    rows.append(ReportRow('header', 'Data size', f'{header.data_size} B'))
    rows.append(ReportRow('header', 'Magic', f'"{header.data_type}"'))
    rows.append(ReportRow('header', 'CRC', _crc_str(header.crc)))

    rows.append(ReportRow('contents', 'Sections', str(len(file.sections))))
    rows.append(ReportRow('contents', 'Records', str(len(file.sections) + file.data_message_count())))
    rows.append(ReportRow('contents', 'Data messages', str(file.data_message_count())))

    counts = {}
    for section in file.sections:
        name = profile.message_name(section.definition.global_message_number)
        counts[name] = counts.get(name, 0) + len(section.data_messages)
    for name, count in counts.items():
        rows.append(ReportRow('contents', name, str(count)))

    rows.append(ReportRow('footer', 'CRC', _crc_str(file.footer.crc)))

    return rows


def format_report(rows: Sequence[ReportRow]) -> str:
    width = max([len(row.key) for row in rows], default=0)

    lines = []
    table = None
    for row in rows:
        if row.table != table:
            if lines:
                lines.append('')
            lines.append(f'[{row.table}]')
            table = row.table
        lines.append(f'{row.key.ljust(width)}  {row.value}')

    return '\n'.join(lines)
