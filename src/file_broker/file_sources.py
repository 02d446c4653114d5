"""
Registration of file sources: remote URLs fetched into notebook files on a schedule.

Unlike file requests these are issued by the notebook UI itself, so store
errors propagate to the caller instead of being reported.
"""
import logging
from typing import Optional, Union

from file_broker.adapters.file_store import BaseFileStore
from file_broker.schemas import Frequency
from file_broker.state import (
    ADD_FILE_SOURCE_TO_NOTEBOOK,
    DELETE_FILE_SOURCE_FROM_NOTEBOOK,
    Dispatch,
    GetState,
)

logger = logging.getLogger(__name__)

# Update intervals in the store's timedelta notation
FREQUENCY_INTERVALS = {
    Frequency.NEVER: None,
    Frequency.DAILY: "1 day, 0:00:00",
    Frequency.WEEKLY: "7 days, 0:00:00",
}


def frequency_to_interval(frequency: Union[Frequency, str, None]) -> Optional[str]:
    """Convert a frequency tag to the store's update interval.

    Raises:
        ValueError: If the tag is not one of never/daily/weekly
    """
    if frequency is None:
        return None
    try:
        frequency = Frequency(frequency)
    except ValueError:
        raise ValueError(
            f"Invalid frequency: {frequency}. Choose from {[f.value for f in Frequency]}"
        ) from None
    return FREQUENCY_INTERVALS[frequency]


async def add_file_source(
    file_store: BaseFileStore,
    get_state: GetState,
    dispatch: Dispatch,
    source_url: str,
    destination_filename: str,
    frequency: Union[Frequency, str, None] = None,
) -> dict:
    notebook_id = get_state().notebook_id
    update_interval = frequency_to_interval(frequency)

    response = await file_store.save_file_source(
        notebook_id, source_url, destination_filename, update_interval
    )
    logger.info(f"Registered file source {response['id']} for {destination_filename} in notebook {notebook_id}")

    dispatch({
        "type": ADD_FILE_SOURCE_TO_NOTEBOOK,
        "source_url": source_url,
        "file_source_id": response["id"],
        "destination_filename": destination_filename,
        "frequency": Frequency(frequency) if frequency is not None else None,
    })
    return response


async def delete_file_source(file_store: BaseFileStore, dispatch: Dispatch, file_source_id: int):
    response = await file_store.delete_file_source(file_source_id)
    dispatch({
        "type": DELETE_FILE_SOURCE_FROM_NOTEBOOK,
        "file_source_id": file_source_id,
    })
    return response
