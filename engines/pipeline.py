"""Wack encode/decode pipeline and round-trip preview."""

import logging
from typing import Optional, Tuple

import numpy as np

from engines.backends import get_backend
from engines.color_space import extract_luma, replace_luma, rgb_to_ycbcr, ycbcr_to_rgb
from engines.container import WackHeader, pack_container, unpack_container
from engines.dct_engine import get_dct_lut
from engines.entropy import compress_bytes, decompress_bytes
from engines.palette import apply_palette, build_palette, palette_to_bytes
from engines.thresholding import drop_count, retained_coefficients, threshold_coefficients, to_int16
from models.codec_params import CodecParams
from models.compression_result import CompressionResult
from models.errors import ContractError
from models.intermediate_data import IntermediateData
from models.planar_buffer import PlanarBuffer
from utils.constants import DEFAULT_PAGE_SIZE, LEVEL_SHIFT, MAX_HEADER_VALUE
from utils.metrics import Timer, compute_psnr_ssim

logger = logging.getLogger(__name__)


def _rgb_buffer(image_rgb: np.ndarray) -> PlanarBuffer:
    if image_rgb.ndim != 3 or image_rgb.shape[2] not in (3, 4):
        raise ContractError(f"Expected an (h, w, 3|4) image, got shape {image_rgb.shape}")
    if image_rgb.dtype != np.uint8:
        raise ContractError(f"Expected uint8 pixels, got {image_rgb.dtype}")
    h, w = image_rgb.shape[:2]
    if w > MAX_HEADER_VALUE or h > MAX_HEADER_VALUE:
        raise ContractError(f"Image {w}x{h} exceeds the container's u16 dimensions")
    return PlanarBuffer.from_array(image_rgb)


def _encode_payload(
    ycbcr: PlanarBuffer,
    params: CodecParams,
    backend,
    intermediate: Optional[IntermediateData] = None
) -> bytes:
    """Build the uncompressed container from a YCbCr buffer (left untouched)."""
    ycbcr.require_channels(3)
    n = params.segment_size
    lut = get_dct_lut(n)
    
    # === LUMA ===
    luma = extract_luma(ycbcr)
    frequency = backend.forward_dct(luma, n, lut)
    luma.release()
    
    count = drop_count(params.threshold, n)
    thresholded = threshold_coefficients(frequency, count, n)
    coeffs = to_int16(thresholded)
    if intermediate is not None:
        intermediate.frequency_domain = frequency.data[:, :, 0].copy()
        intermediate.thresholded_coeffs = coeffs.copy()
    frequency.release()
    thresholded.release()
    
    # === CHROMA ===
    chroma = indices = colors = None
    working = ycbcr.copy()
    if not params.is_grayscale:
        backend.subsample_chroma(working, params.subsample_size, params.subsample_mode)
        if params.uses_palette:
            colors = palette_to_bytes(
                build_palette(working, params.num_colors, params.grayscale_palette)
            )
            indices = backend.quantize(working, colors.astype(np.float32), params.dither)
            apply_palette(working, colors.astype(np.float32), indices)
        else:
            chroma = np.clip(np.rint(working.data[:, :, 1:3]), 0, 255).astype(np.uint8)
    if intermediate is not None:
        intermediate.subsampled_ycbcr = working.data.copy()
        intermediate.palette = colors
        intermediate.palette_indices = indices
    working.release()
    
    header = WackHeader(
        width=ycbcr.width,
        height=ycbcr.height,
        dct_segment_size=n,
        chroma_segment_size=0 if params.is_grayscale else params.subsample_size,
        num_colors=params.num_colors if params.uses_palette else 0,
    )
    payload = pack_container(header, coeffs, chroma=chroma, indices=indices, palette=colors)
    logger.debug(
        "Encoded %dx%d: N=%d, %d/%d coefficients kept, S=%d, %d colors, %d payload bytes",
        header.width, header.height, n, retained_coefficients(count, n), n * n,
        header.chroma_segment_size, header.num_colors, len(payload)
    )
    return payload


def encode_ycbcr(ycbcr: PlanarBuffer, params: CodecParams, backend=None) -> bytes:
    """Encode a pre-built YCbCr buffer; the caller keeps ownership of it."""
    backend = backend or get_backend(params.backend)
    payload = _encode_payload(ycbcr, params, backend)
    return compress_bytes(payload, params.page_size)


def encode(image_rgb: np.ndarray, params: CodecParams, backend=None) -> bytes:
    """RGB(A) uint8 image to compressed Wack bytes."""
    rgb = _rgb_buffer(image_rgb)
    ycbcr = rgb_to_ycbcr(rgb)
    rgb.release()
    try:
        return encode_ycbcr(ycbcr, params, backend)
    finally:
        ycbcr.release()


def decode_to_ycbcr(data: bytes, page_size: int = DEFAULT_PAGE_SIZE, backend=None) -> PlanarBuffer:
    """Compressed Wack bytes to a new YCbCr buffer owned by the caller."""
    backend = backend or get_backend('reference')
    record = unpack_container(decompress_bytes(data, page_size))
    header = record.header
    n = header.dct_segment_size
    
    frequency = PlanarBuffer(record.luma.astype(np.float32)[:, :, np.newaxis])
    luma = backend.inverse_dct(frequency, n, get_dct_lut(n))
    frequency.release()
    
    ycbcr = PlanarBuffer.allocate(header.width, header.height, 3)
    chroma = record.chroma_pairs()
    if chroma is None:
        ycbcr.data[:, :, 1:3] = LEVEL_SHIFT
    else:
        ycbcr.data[:, :, 1:3] = chroma
    replace_luma(ycbcr, luma)
    luma.release()
    logger.debug("Decoded %dx%d container (%d bytes)", header.width, header.height, len(data))
    return ycbcr


def decode(data: bytes, include_alpha: bool = True, page_size: int = DEFAULT_PAGE_SIZE,
           backend=None) -> np.ndarray:
    """Compressed Wack bytes to an (h, w, 4) RGBA (or RGB) uint8 image."""
    ycbcr = decode_to_ycbcr(data, page_size, backend)
    rgb = ycbcr_to_rgb(ycbcr, include_alpha)
    ycbcr.release()
    image = rgb.data
    rgb.release()
    return image


def compress_reconstruct(
    image_rgb: np.ndarray,
    params: CodecParams
) -> Tuple[CompressionResult, IntermediateData]:
    """Encode, decode and measure one image."""
    timer = Timer()
    backend = get_backend(params.backend)
    intermediate = IntermediateData()
    
    def _encode():
        rgb = _rgb_buffer(image_rgb)
        ycbcr = rgb_to_ycbcr(rgb)
        rgb.release()
        try:
            return _encode_payload(ycbcr, params, backend, intermediate)
        finally:
            ycbcr.release()
    
    payload = timer.measure_encode(_encode)
    container = compress_bytes(payload, params.page_size)
    
    reconstructed_ycbcr = timer.measure_decode(decode_to_ycbcr, container, params.page_size, backend)
    intermediate.compressed_luma = np.rint(reconstructed_ycbcr.plane(0)).astype(np.uint8)
    rgb = ycbcr_to_rgb(reconstructed_ycbcr, include_alpha=False)
    reconstructed_ycbcr.release()
    rgb_recon = rgb.data
    rgb.release()
    
    # === METRICS ===
    metrics = compute_psnr_ssim(image_rgb[:, :, :3], rgb_recon)
    n = params.segment_size
    
    result = CompressionResult(
        original_image=image_rgb,
        reconstructed_image=rgb_recon,
        container=container,
        psnr_y=metrics['psnr_y'],
        ssim_y=metrics['ssim_y'],
        psnr_rgb=metrics['psnr_rgb'],
        ssim_rgb=metrics['ssim_rgb'],
        raw_size=image_rgb.shape[0] * image_rgb.shape[1] * 3,
        payload_size=len(payload),
        compressed_size=len(container),
        retained_coeffs=retained_coefficients(drop_count(params.threshold, n), n),
        block_coeffs=n * n,
        encode_time_ms=timer.encode_time_ms,
        decode_time_ms=timer.decode_time_ms,
    )
    return result, intermediate
