"""
Roost Schemas — System Letters
=================================
Well-known host engine system messages and their payload schemas.

Static data, loaded into a bus at construction when
BusConfig.load_system_letters is set. Entries may be redefined
at runtime through MessageBus.define().

None means the payload is optional and not checked.
"""

from __future__ import annotations

from types import MappingProxyType


SYSTEM_LETTERS = MappingProxyType({
    # ── Camera ────────────────────────────────────────────────
    "set_camera": {
        "aspect_ratio": "number",
        "fov": "number",
        "near_z": "number",
        "far_z": "number",
        "orthographic_projection": "boolean",
        "orthographic_zoom": "number",
    },
    "acquire_camera_focus": None,
    "release_camera_focus": None,

    # ── Collection Proxy ──────────────────────────────────────
    "set_time_step": {
        "factor": "number",
        "mode": "number",
    },
    "load": None,
    "unload": None,
    "async_load": None,
    "proxy_loaded": None,
    "proxy_unloaded": None,
    "init": None,
    "final": None,

    # ── Collection Proxy, Game Object ─────────────────────────
    "enable": None,
    "disable": None,

    # ── Game Object ───────────────────────────────────────────
    "acquire_input_focus": None,
    "release_input_focus": None,
    "set_parent": {
        "parent_id": "hash",
        "keep_world_transform": "number",
    },

    # ── GUI ───────────────────────────────────────────────────
    "layout_changed": {
        "id": "hash",
        "previous_id": "hash",
    },

    # ── Model ─────────────────────────────────────────────────
    "model_animation_done": {
        "animation_id": "hash",
        "playback": "number",
    },

    # ── Physics ───────────────────────────────────────────────
    "apply_force": {
        "force": "vector",
        "position": "vector",
    },
    "collision_response": {
        "other_id": "hash",
        "other_position": "vector",
        "other_group": "hash",
        "own_group": "hash",
    },
    "contact_point_response": {
        "position": "vector",
        "normal": "vector",
        "relative_velocity": "vector",
        "distance": "number",
        "applied_impulse": "number",
        "life_time": "number",
        "mass": "number",
        "other_mass": "number",
        "other_id": "hash",
        "other_position": "vector",
        "other_group": "hash",
        "own_group": "hash",
    },
    "trigger_response": {
        "other_id": "hash",
        "enter": "boolean",
        "other_group": "hash",
        "own_group": "hash",
    },
    "ray_cast_response": {
        "fraction": "number",
        "position": "vector",
        "normal": "vector",
        "id": "hash",
        "group": "hash",
        "request_id": "number",
    },
    "ray_cast_missed": {
        "request_id": "number",
    },

    # ── Render ────────────────────────────────────────────────
    "draw_debug_text": {
        "position": "vector",
        "text": "string",
        "color": "vector",
    },
    "draw_line": {
        "start_point": "vector",
        "end_point": "vector",
        "color": "vector",
    },
    "window_resized": {
        "height": "number",
        "width": "number",
    },
    "resize": {
        "height": "number",
        "width": "number",
    },
    "clear_color": {
        "color": "vector",
    },

    # ── Sound ─────────────────────────────────────────────────
    "play_sound": None,
    "stop_sound": None,
    "set_gain": None,
    "sound_done": None,

    # ── Sprite ────────────────────────────────────────────────
    "play_animation": {
        "id": "hash",
    },
    "animation_done": {
        "current_tile": "number",
        "id": "hash",
    },

    # ── Sys ───────────────────────────────────────────────────
    "exit": {
        "code": "number",
    },
    "toggle_profile": None,
    "toggle_physics_debug": None,
    "start_record": {
        "file_name": "string",
        "frame_period": "number",
        "fps": "number",
    },
    "stop_record": None,
    "reboot": None,
    "set_vsync": {
        "swap_interval": "number",
    },
    "set_update_frequency": {
        "frequency": "number",
    },
})
