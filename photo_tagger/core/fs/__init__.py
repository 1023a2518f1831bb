from .categories import TAG_FILE, collect_subdirs, load_tag_records, move_to_tag_dir, save_tag_records
from .folders import (
    CollisionPolicy,
    PlannedMove,
    apply_move,
    group_folder_name,
    locate_organized,
    materialize_group_folders,
    plan_move,
    plan_moves,
)
from .group_records import (
    GROUP_FILE,
    collect_images_flat,
    is_image,
    load_group_records,
    load_record_mapping,
    save_group_records,
    save_record_mapping,
)

__all__ = [
    "GROUP_FILE",
    "TAG_FILE",
    "collect_images_flat",
    "collect_subdirs",
    "is_image",
    "load_group_records",
    "save_group_records",
    "load_record_mapping",
    "save_record_mapping",
    "load_tag_records",
    "save_tag_records",
    "CollisionPolicy",
    "PlannedMove",
    "group_folder_name",
    "plan_move",
    "plan_moves",
    "apply_move",
    "materialize_group_folders",
    "locate_organized",
    "move_to_tag_dir",
]
