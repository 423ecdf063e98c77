# Copyright 2019 Joan Puig
# See LICENSE for details


from typing import Union

import pandas as pd

from FITInspector.message import name_message
from FITInspector.model import File, Section
from FITInspector.profile import DEFAULT_PROFILE, Profile


class FITMessageNotFoundError(Exception):
    pass


def section_frame(section: Section, profile: Profile = DEFAULT_PROFILE, apply_scale: bool = True) -> pd.DataFrame:
    """
    One row per data message of the section, one column per field named after the profile
    """
    rows = [name_message(section.definition, data_message, profile, apply_scale).as_dict() for data_message in section.data_messages]
    return pd.DataFrame(rows)


def message_frame(file: File, message: Union[str, int], profile: Profile = DEFAULT_PROFILE, apply_scale: bool = True) -> pd.DataFrame:
    """
    Gathers every data message of one global message type (e.g. 'record') across all sections, in file order
    Columns missing from some sections are filled with NaN
    """
    if isinstance(message, str):
        global_message_number = profile.message_number(message)
        if global_message_number is None:
            raise FITMessageNotFoundError(f'Message "{message}" is not part of the profile')
    else:
        global_message_number = message

    frames = [section_frame(section, profile, apply_scale) for section in file.sections
              if section.definition.global_message_number == global_message_number and section.data_messages]

    if not frames:
        return pd.DataFrame()

    return pd.concat(frames, ignore_index=True, sort=False)
