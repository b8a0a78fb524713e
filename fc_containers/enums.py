"""Enumerations for the fields stored in iNES / NES 2.0 headers.

Member values equal the codes written to the header.
"""
from __future__ import annotations

import enum


class _OpenIntEnum(enum.IntEnum):
    """IntEnum that maps unnamed header codes to ``UNKNOWN_xx`` pseudo-members."""

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, int) or value < 0:
            return None
        pseudo = int.__new__(cls, value)
        pseudo._name_ = f"UNKNOWN_{value:02X}"
        pseudo._value_ = value
        return cls._value2member_map_.setdefault(value, pseudo)


class NesVersion(enum.IntEnum):
    INES = 1
    NES20 = 2


class Mirroring(enum.IntEnum):
    """What CIRAM A10 is connected to."""

    HORIZONTAL = 0
    VERTICAL = 1
    ONE_SCREEN_A = 2
    ONE_SCREEN_B = 3
    FOUR_SCREEN_VRAM = 4
    MAPPER_CONTROLLED = 5
    UNKNOWN = 0xFF


class Timing(enum.IntEnum):
    """CPU/PPU timing, a function of the release region."""

    NTSC = 0
    PAL = 1
    MULTIPLE = 2
    DENDY = 3


class ConsoleType(enum.IntEnum):
    NORMAL = 0
    VS_SYSTEM = 1
    PLAYCHOICE10 = 2
    EXTENDED = 3


class VsPpuType(_OpenIntEnum):
    RP2C03B = 0x00
    RP2C03G = 0x01
    RP2C04_0001 = 0x02
    RP2C04_0002 = 0x03
    RP2C04_0003 = 0x04
    RP2C04_0004 = 0x05
    RC2C03B = 0x06
    RC2C03C = 0x07
    RC2C05_01 = 0x08
    RC2C05_02 = 0x09
    RC2C05_03 = 0x0A
    RC2C05_04 = 0x0B
    RC2C05_05 = 0x0C


class VsHardwareType(_OpenIntEnum):
    VS_UNISYSTEM_NORMAL = 0x00
    VS_UNISYSTEM_RBI_BASEBALL_PROTECTION = 0x01
    VS_UNISYSTEM_TKO_BOXING_PROTECTION = 0x02
    VS_UNISYSTEM_SUPER_XEVIOUS_PROTECTION = 0x03
    VS_UNISYSTEM_ICE_CLIMBER_JAPAN_PROTECTION = 0x04
    VS_DUAL_SYSTEM_NORMAL = 0x05
    VS_DUAL_SYSTEM_RAID_ON_BUNGELING_BAY_PROTECTION = 0x06


class ExtendedConsoleType(_OpenIntEnum):
    REGULAR_NES = 0x00
    NINTENDO_VS_SYSTEM = 0x01
    PLAYCHOICE10 = 0x02
    FAMICLONE_WITH_DECIMAL_MODE = 0x03
    VT01_MONOCHROME = 0x04
    VT01_RED_CYAN_STN_PALETTE = 0x05
    VT02 = 0x06
    VT03 = 0x07
    VT09 = 0x08
    VT32 = 0x09
    VT369 = 0x0A
    UMC_UM6578 = 0x0B


class ExpansionDevice(_OpenIntEnum):
    """Default expansion device (NES 2.0 byte 15)."""

    UNSPECIFIED = 0x00
    STANDARD = 0x01
    NES_FOUR_SCORE = 0x02
    FAMICOM_FOUR_PLAYERS_ADAPTER = 0x03
    VS_SYSTEM = 0x04
    VS_SYSTEM_REVERSED_INPUTS = 0x05
    VS_PINBALL = 0x06
    VS_ZAPPER = 0x07
    ZAPPER = 0x08
    TWO_ZAPPERS = 0x09
    BANDAI_HYPER_SHOT_LIGHTGUN = 0x0A
    POWER_PAD_SIDE_A = 0x0B
    POWER_PAD_SIDE_B = 0x0C
    FAMILY_TRAINER_SIDE_A = 0x0D
    FAMILY_TRAINER_SIDE_B = 0x0E
    ARKANOID_VAUS_NES = 0x0F
    ARKANOID_VAUS_FAMICOM = 0x10
    TWO_VAUS_PLUS_DATA_RECORDER = 0x11
    KONAMI_HYPER_SHOT = 0x12
    COCONUTS_PACHINKO = 0x13
    EXCITING_BOXING_PUNCHING_BAG = 0x14
    JISSEN_MAHJONG = 0x15
    PARTY_TAP = 0x16
    OEKA_KIDS_TABLET = 0x17
    SUNSOFT_BARCODE_BATTLER = 0x18
    MIRACLE_PIANO_KEYBOARD = 0x19
    POKKUN_MOGURAA = 0x1A
    TOP_RIDER = 0x1B
    DOUBLE_FISTED = 0x1C
    FAMICOM_3D_SYSTEM = 0x1D
    DOREMIKKO_KEYBOARD = 0x1E
    ROB_GYRO_SET = 0x1F
    FAMICOM_DATA_RECORDER = 0x20
    ASCII_TURBO_FILE = 0x21
    IGS_STORAGE_BATTLE_BOX = 0x22
    FAMILY_BASIC_KEYBOARD_PLUS_DATA_RECORDER = 0x23
    DONGDA_PEC586_KEYBOARD = 0x24
    BIT_CORP_BIT79_KEYBOARD = 0x25
    SUBOR_KEYBOARD = 0x26
    SUBOR_KEYBOARD_PLUS_MOUSE_3X8 = 0x27
    SUBOR_KEYBOARD_PLUS_MOUSE_24 = 0x28
    SNES_MOUSE_4017 = 0x29
    MULTICART = 0x2A
    TWO_SNES_CONTROLLERS = 0x2B
    RACERMATE_BICYCLE = 0x2C
    U_FORCE = 0x2D
    ROB_STACK_UP = 0x2E
    CITY_PATROLMAN_LIGHTGUN = 0x2F
    SHARP_C1_CASSETTE_INTERFACE = 0x30
    STANDARD_CONTROLLER_SWAPPED = 0x31
    EXCALIBOR_SUDOKU_PAD = 0x32
    ABL_PINBALL = 0x33
    GOLDEN_NUGGET_CASINO_EXTRA_BUTTONS = 0x34
