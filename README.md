# boardcam

Building blocks for recognising a chessboard in camera frames and writing
the moves that were played in a compact notation.

The board is located by four coloured corner markers (one blue "origin"
marker and three green ones). From their positions the centres of the 64
fields are computed, the colours of empty fields and of both sides' pieces
are calibrated from the starting position, and later frames can be
classified field by field. Changes between two turns are turned into a move
and appended to a notation log.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Example

```python
from boardcam.frame import Frame
from boardcam.board import find_markers, calculate_fields
from boardcam.pieces import calibrate_colors, get_field_state, FieldState
from boardcam.moves import MoveRecorder, FieldChange

with open("start.ppm", "rb") as fh:
    start = Frame.from_ppm(fh.read()).quantized(0b11000000)

markers = find_markers(start)          # None unless 4 markers, 1 origin
fields = calculate_fields(markers)     # square centres, indexed [x][y]
calibration = calibrate_colors(start, fields)

with open("turn1.ppm", "rb") as fh:
    frame = Frame.from_ppm(fh.read()).quantized(0b11000000)

state = get_field_state(frame, fields[4][3], (4 & 1) == (3 & 1), calibration)

recorder = MoveRecorder("chess_notation.txt")
changes = [[FieldChange.NO_CHANGE] * 8 for _ in range(8)]
changes[1][4] = FieldChange.EMPTY
changes[3][4] = FieldChange.WHITE_PIECE
print(recorder.analyse(changes))       # appended to chess_notation.txt
```

## Modules

- `boardcam.vec2d` — `Vec2i` and `Vec2f` 2-D vectors with `+`, `*`, `/`;
  `Vec2f.rounded()` rounds halves away from zero.
- `boardcam.frame` — `Frame` (RGB888 pixel access, `quantized`,
  `Frame.from_ppm` for binary PPM images), `FrameSize`, `AspectRatio`,
  `resolution`, `PixelFormat` and `render_channels`, which draws each
  colour channel as ASCII art.
- `boardcam.board` — `Marker`, `MarkerCheck`, `check_possible_marker`,
  `find_marker`, `find_markers`, `calculate_fields`, `check_markers`.
- `boardcam.pieces` — `FieldState`, `ColorCalibration`, `avg_color_field`,
  `color_distance`, `calibrate_colors`, `get_field_state`.
- `boardcam.moves` — `FieldChange`, `initial_position` and `MoveRecorder`,
  which tracks the pieces and appends each move (including castling and
  en passant markers) to a log file.

The capture side of the camera is modelled as well:

- `boardcam.twi` — `SoftI2C`, a bit-banged two-wire bus master over a
  `Lines` implementation you provide, with `clock_divider` and the
  `I2CError` family of exceptions.
- `boardcam.sccb` — `SCCB` register reads and writes (8- and 16-bit
  register addresses) and bus probing; `swap_bytes`.
- `boardcam.xclk` — `clock_settings`, the timer and channel settings for
  the sensor clock.
- `boardcam.dma` — `dma_layout` of the receive ring and the sample filters
  (`filter_jpeg`, `filter_grayscale`, `filter_yuyv`, `filter_rgb888` and
  their high-speed variants).
- `boardcam.framebuffers` — `FrameBufferRing`, `FrameBuffer`, `jpeg_length`.
- `boardcam.camera` — `probe_camera`, `plan_capture`, `max_frame_size`,
  `CameraConfig` and `Camera`, which assembles frames from the samples fed
  to it with `feed` and `end_frame`.

## What the package does not do

- There is no command-line program; the package installs no command.
- There is no single call that runs a whole game: setting up the board and
  analysing each turn (comparing field states with the previous turn and
  building the `FieldChange` grid for `MoveRecorder.analyse`) is left to the
  caller, using the functions above.
- It does not talk to camera hardware by itself. `SoftI2C` drives whatever
  `Lines` object it is given, and `Camera` only processes the samples passed
  to `feed`.