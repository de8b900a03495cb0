"""Streamlit Photo Watermark Application

Implements:
 - Single image upload (JPG / PNG / WebP) with type check
 - Repeating, rotated, semi-transparent text watermark
 - Live preview, fully re-rendered on every control change
 - PNG / JPEG / WebP download as watermarked.<ext>
"""

from __future__ import annotations

import logging

import streamlit as st

from photo_watermark.config import AppConfig, configure_logging
from photo_watermark.errors import WatermarkError
from photo_watermark.exporter import (
    EXPORT_FORMATS,
    export_filename,
    export_surface,
    mime_type_for,
)
from photo_watermark.renderer import fit_width
from photo_watermark.session import WatermarkSession
from photo_watermark.settings import (
    DEFAULT_SETTINGS,
    UI_RANGES,
    WatermarkSettings,
    safe_color_hex,
)
from photo_watermark.upload import SUPPORTED_IMPORT_EXTS

logger = logging.getLogger("watermark_app")

# ---------------------------- Configuration ---------------------------- #
CONFIG = AppConfig.load()
configure_logging(CONFIG.log_level)


# ---------------------------- Streamlit UI ---------------------------- #
def init_session_state():  # idempotent
    if "wm_session" not in st.session_state:
        st.session_state.wm_session = WatermarkSession(
            font_path=CONFIG.font_path,
            max_upload_bytes=CONFIG.max_upload_bytes,
        )
    if "_upload_sig" not in st.session_state:
        st.session_state._upload_sig = None
    # Bumped on reset so the file_uploader widget comes back empty
    if "_uploader_key" not in st.session_state:
        st.session_state._uploader_key = 0


def sidebar_import_panel():
    st.sidebar.header("1. 导入图片 / Import")
    session: WatermarkSession = st.session_state.wm_session
    uploaded = st.sidebar.file_uploader(
        "选择或拖拽图片 / Drop an image here",
        type=sorted(e[1:] for e in SUPPORTED_IMPORT_EXTS),
        accept_multiple_files=False,
        key=f"uploader_{st.session_state._uploader_key}",
        help="Supports JPG, PNG, WebP",
    )
    if uploaded is not None:
        sig = getattr(uploaded, "file_id", None) or (uploaded.name, uploaded.size)
        if sig != st.session_state._upload_sig:
            st.session_state._upload_sig = sig
            try:
                session.upload(uploaded.getvalue(), uploaded.type, name=uploaded.name)
            except WatermarkError as e:
                logger.warning("Upload of %s rejected: %s", uploaded.name, e)
                st.session_state._upload_error = str(e)
            else:
                st.session_state._upload_error = None
    if st.session_state.get("_upload_error"):
        st.sidebar.error(st.session_state._upload_error)
    if session.has_image:
        img = session.image
        st.sidebar.caption(f"{img.name or 'image'} · {img.width}x{img.height}")
        if st.sidebar.button("上传新图片 / Upload New Image", key="reset_image"):
            session.reset()
            st.session_state._upload_sig = None
            st.session_state._upload_error = None
            st.session_state._uploader_key += 1
            st.rerun()
    else:
        st.sidebar.info("尚未导入图片")


def _slider(label: str, name: str, value: float, fmt: str):
    lo, hi, step = UI_RANGES[name]
    if isinstance(step, int) and float(lo).is_integer() and float(hi).is_integer():
        return st.sidebar.slider(
            label, int(lo), int(hi), int(value), int(step), key=f"wm_{name}", format=fmt
        )
    return st.sidebar.slider(
        label, float(lo), float(hi), float(value), float(step), key=f"wm_{name}", format=fmt
    )


def sidebar_text_watermark():
    st.sidebar.header("2. 文本水印 / Watermark")
    session: WatermarkSession = st.session_state.wm_session
    # Widget state lives under the wm_* keys; defaults stay constant so the
    # widget identities do not change between reruns
    cfg: WatermarkSettings = DEFAULT_SETTINGS
    text = st.sidebar.text_input(
        "文本内容 / Watermark Text",
        value=cfg.text,
        placeholder="Enter watermark text...",
        key="wm_text",
    )
    font_size = _slider("字号 / Font Size (px)", "font_size", cfg.font_size, "%dpx")
    opacity = _slider("透明度 / Opacity", "opacity", cfg.opacity, "%.2f")
    rotation = _slider("旋转 / Rotation (°)", "rotation", cfg.rotation, "%d°")
    spacing = _slider("间距 / Spacing (px)", "spacing", cfg.spacing, "%dpx")
    color = st.sidebar.color_picker(
        "颜色 / Color", value=safe_color_hex(cfg.rgb()), key="wm_color"
    )
    # Replaced wholesale, never merged
    try:
        session.update_settings(
            WatermarkSettings.from_mapping(
                {
                    "text": text,
                    "font_size": font_size,
                    "opacity": opacity,
                    "rotation": rotation,
                    "spacing": spacing,
                    "color": color,
                }
            )
        )
    except WatermarkError as e:
        st.sidebar.error(f"设置无效 / Invalid setting: {e}")
    if st.sidebar.button("恢复默认 / Defaults", key="wm_defaults"):
        for name in ("wm_text", "wm_font_size", "wm_opacity", "wm_rotation", "wm_spacing", "wm_color"):
            st.session_state.pop(name, None)
        session.update_settings(DEFAULT_SETTINGS)
        st.rerun()


def sidebar_export_settings():
    st.sidebar.header("3. 导出 / Export")
    formats = list(EXPORT_FORMATS)
    st.sidebar.selectbox(
        "输出格式 / Format",
        formats,
        index=formats.index(CONFIG.default_format),
        format_func=lambda f: f.upper(),
        key="export_format",
    )


def main_layout():
    st.title("📷 Image Watermark Tool")
    st.caption("Add repeating text watermarks to your images")
    session: WatermarkSession = st.session_state.wm_session
    if not session.has_image:
        st.info("请在左侧导入图片 / Upload an image to see preview")
        return

    st.subheader("预览 / Preview")
    # Full redraw on every rerun; the same surface feeds preview and download
    try:
        surface = session.render()
    except WatermarkError as e:
        logger.warning("Render failed: %s", e)
        st.error(f"渲染失败 / Render failed: {e}")
        return
    st.image(fit_width(surface, CONFIG.preview_width), width="stretch")
    if not session.settings.enabled:
        st.warning("当前没有水印：请输入文本 / Enter watermark text to enable download.")

    fmt = st.session_state.get("export_format", CONFIG.default_format)
    data = b""
    if session.can_export:
        try:
            data = export_surface(surface, fmt)
        except WatermarkError as e:
            logger.warning("Export as %s failed: %s", fmt, e)
            st.error(f"导出失败 / Export failed: {e}")
    st.download_button(
        f"下载 / Download as {fmt.upper()}",
        data=data,
        file_name=export_filename(fmt),
        mime=mime_type_for(fmt),
        disabled=not data,
        width="stretch",
        key="download",
    )


def run_app():
    st.set_page_config(page_title="Image Watermark Tool", page_icon="📷", layout="wide")
    init_session_state()
    # Sidebar
    sidebar_import_panel()
    sidebar_text_watermark()
    sidebar_export_settings()
    # Main layout
    main_layout()


if __name__ == "__main__":
    # Allow running via `streamlit run watermark_app.py`
    run_app()
